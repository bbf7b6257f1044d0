"""
Command Parser for RogueCode.

Turns a raw input line into a structured Command:
the first whitespace-separated token is the action, ``--name`` and
``-n`` tokens are flags, and everything else is a positional argument.
"""

from __future__ import annotations

import logging

from roguecode.engine.models import Command

logger = logging.getLogger(__name__)

LONG_FLAG_PREFIX = "--"
SHORT_FLAG_PREFIX = "-"


class CommandParser:
    """Whitespace tokenizer with long and short boolean flags."""

    def parse(self, raw: str | None) -> Command:
        """
        Parse an input line. Never raises.

        Args:
            raw: Text typed by the player

        Returns:
            Command with action None for blank input
        """
        try:
            return self._parse(raw)
        except Exception as e:
            logger.warning(f"Parser failed on {raw!r}, falling back to bare action: {e}")
            return Command(action=self._first_token(raw), args=[], flags={})

    def _parse(self, raw: str | None) -> Command:
        if raw is None or not raw.strip():
            return Command()

        tokens = raw.split()
        action = tokens[0].lower()
        args: list[str] = []
        flags: dict[str, bool] = {}

        for token in tokens[1:]:
            if token.startswith(LONG_FLAG_PREFIX):
                name = token[len(LONG_FLAG_PREFIX):]
            elif token.startswith(SHORT_FLAG_PREFIX):
                name = token[len(SHORT_FLAG_PREFIX):]
            else:
                args.append(token)
                continue

            # Bare "-" and "--" carry no flag name and are dropped
            if name:
                flags[name] = True

        return Command(action=action, args=args, flags=flags)

    @staticmethod
    def _first_token(raw: object) -> str | None:
        try:
            tokens = str(raw).split() if raw is not None else []
        except Exception:
            return None
        return tokens[0].lower() if tokens else None


_default_parser = CommandParser()


def parse_command(raw: str | None) -> Command:
    """Parse an input line with the shared default parser."""
    return _default_parser.parse(raw)
