"""
Session Shell for RogueCode.

Orchestrates turn-taking: receives raw input, parses and resolves it,
appends the result to the display log, fires UI hooks for side-effect
tags, and autosaves through the persistence collaborator.
"""

from __future__ import annotations

import inspect
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from roguecode.db.interfaces import SnapshotStore, WorldStore
from roguecode.db.memory import InMemoryWorldStore
from roguecode.engine.models import EngineConfig, Response, ResponseAction, ResponseType
from roguecode.engine.parser import CommandParser
from roguecode.engine.resolver import CommandResolver
from roguecode.models.player import Player
from roguecode.services.enrichment import EnrichmentProvider
from roguecode.services.progression import ProgressionService

logger = logging.getLogger(__name__)

Hook = Callable[[Response], Any]

MAX_HISTORY = 50

COMMAND_ENTRY = "command"

WELCOME_BANNER: list[tuple[str, ResponseType]] = [
    ("RogueCode OS v1.0.3 [Build 20771225]", ResponseType.SYSTEM),
    ("Initializing secure connection...", ResponseType.SYSTEM),
    ("Connection established. Welcome back, Rogue.", ResponseType.SUCCESS),
    ('Type "help" to see available commands.', ResponseType.INFO),
]


class LogEntry(BaseModel):
    """One line (or block) in the terminal display log."""

    text: str
    type: str = Field(description="A ResponseType value, or 'command' for echoed input")
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def from_response(cls, response: Response) -> LogEntry:
        return cls(text=response.text, type=response.type.value)


@dataclass
class GameSession:
    """
    A single-player session around one resolver.

    Commands are processed one at a time; ``is_processing`` gates
    submission while a command (and any enrichment call) is in flight.
    """

    resolver: CommandResolver
    parser: CommandParser = field(default_factory=CommandParser)
    persistence: SnapshotStore | None = None
    config: EngineConfig = field(default_factory=EngineConfig)

    log: list[LogEntry] = field(default_factory=list)
    history: list[str] = field(default_factory=list)
    """Submitted input, newest first."""

    is_processing: bool = False
    _hooks: dict[ResponseAction, list[Hook]] = field(default_factory=dict)

    @property
    def progression(self) -> ProgressionService:
        return self.resolver.progression

    @property
    def world(self) -> WorldStore:
        return self.resolver.world

    @property
    def player(self) -> Player:
        return self.resolver.progression.player

    def show_welcome(self) -> None:
        """Append the boot banner to the log."""
        for text, entry_type in WELCOME_BANNER:
            self.log.append(LogEntry(text=text, type=entry_type.value))

    def on(self, action: ResponseAction, hook: Hook) -> None:
        """
        Register a UI hook for a side-effect tag.

        Hooks receive the Response and may be sync or async.
        """
        self._hooks.setdefault(action, []).append(hook)

    async def submit(self, raw: str) -> Response | None:
        """
        Process one line of player input.

        Args:
            raw: Text typed by the player

        Returns:
            The Response, or None for blank input
        """
        if raw is None or not raw.strip():
            return None

        if self.is_processing:
            return Response.warning("Command in progress. Please wait.")

        self.is_processing = True
        try:
            self._remember(raw)
            self.log.append(LogEntry(text=f"$ {raw}", type=COMMAND_ENTRY))

            command = self.parser.parse(raw)
            response = await self.resolver.resolve(command)

            if response.action == ResponseAction.CLEAR_TERMINAL:
                self.log = [LogEntry(text="Terminal cleared.", type=ResponseType.SYSTEM.value)]
            else:
                self.log.append(LogEntry.from_response(response))

            await self._fire_hooks(response)

            if self.config.autosave:
                self.save()

            return response
        finally:
            self.is_processing = False

    def _remember(self, raw: str) -> None:
        self.history.insert(0, raw)
        del self.history[MAX_HISTORY:]

    async def _fire_hooks(self, response: Response) -> None:
        if response.action is None:
            return

        for hook in self._hooks.get(response.action, []):
            try:
                result = hook(response)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Hook for {response.action.value} failed")

    # Persistence

    def snapshot(self) -> dict[str, Any]:
        """Combined snapshot of progression and world state."""
        return {
            "player": self.progression.snapshot(),
            "world": self.world.snapshot(),
        }

    def restore(self, blob: dict[str, Any]) -> None:
        """
        Replace progression and world state from a snapshot.

        The player is validated before the world is touched, and only
        installed once the world has been restored, so a bad snapshot
        changes neither.

        Raises:
            ValueError: If any part of the snapshot is malformed
        """
        if not isinstance(blob, dict):
            raise ValueError("Snapshot must be an object")

        player = None
        if "player" in blob:
            if not isinstance(blob["player"], dict):
                raise ValueError("Snapshot section 'player' must be an object")
            player = Player.model_validate(blob["player"])

        if "world" in blob:
            self.world.restore(blob["world"])
        if player is not None:
            self.progression.player = player

    def save(self) -> bool:
        """Write a snapshot to the persistence collaborator, if any."""
        if self.persistence is None:
            return False

        try:
            self.persistence.save(self.snapshot())
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save game: {e}")
            return False
        return True

    def load(self) -> bool:
        """
        Restore from the persistence collaborator.

        Returns:
            True if a saved game was restored
        """
        if self.persistence is None:
            return False

        try:
            blob = self.persistence.load()
        except ValueError as e:
            logger.warning(f"Ignoring unreadable save, starting fresh: {e}")
            return False

        if blob is None:
            return False

        try:
            self.restore(blob)
        except ValueError as e:
            logger.warning(f"Ignoring invalid save, starting fresh: {e}")
            return False

        logger.info("Saved game restored")
        return True


def create_session(
    config: EngineConfig | None = None,
    enrichment: EnrichmentProvider | None = None,
    persistence: SnapshotStore | None = None,
    rng: random.Random | None = None,
) -> GameSession:
    """
    Wire a fresh session: one progression service, one world store,
    one resolver.

    Args:
        config: Engine configuration (defaults if omitted)
        enrichment: Optional narrative provider
        persistence: Optional save/load collaborator
        rng: Random source for every probability draw

    Returns:
        A new GameSession with an empty log
    """
    config = config or EngineConfig()
    progression = ProgressionService(
        player=Player(credits=config.starting_credits),
        starting_credits=config.starting_credits,
    )
    resolver = CommandResolver(
        progression=progression,
        world=InMemoryWorldStore(),
        enrichment=enrichment,
        config=config,
        rng=rng or random.Random(),
    )
    return GameSession(resolver=resolver, persistence=persistence, config=config)
