"""
Interactive REPL for RogueCode.

Provides a text-based terminal for playing the game.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
from pathlib import Path

from roguecode.db.json_file import DEFAULT_SAVE_PATH, JsonFileSnapshotStore
from roguecode.engine import EngineConfig, GameSession, Response, ResponseAction, create_session
from roguecode.services.enrichment import EnrichmentProvider
from roguecode.services.llm import create_llm_service

logger = logging.getLogger(__name__)

PROMPT = "rogue@terminal:~$ "


class GameREPL:
    """
    Interactive REPL for playing RogueCode.

    Reads input, hands it to the session, and prints each response.
    """

    def __init__(
        self,
        *,
        save_file: Path | None = DEFAULT_SAVE_PATH,
        use_enrichment: bool = True,
        mock_llm: bool = False,
        seed: int | None = None,
    ) -> None:
        self.save_file = save_file
        self.use_enrichment = use_enrichment
        self.mock_llm = mock_llm
        self.seed = seed
        self.running = True

    def _build_enrichment(self, config: EngineConfig) -> EnrichmentProvider | None:
        """Create the narrative provider, or None when disabled."""
        if not self.use_enrichment:
            return None

        service = create_llm_service(
            "mock" if self.mock_llm else "groq",
            max_tokens=config.llm_max_tokens,
            temperature=config.llm_temperature,
        )
        if not service.is_available:
            logger.info("No GROQ_API_KEY set, using local generation only")
        return service

    def build_session(self) -> GameSession:
        """Wire a session with persistence and enrichment."""
        config = EngineConfig(use_enrichment=self.use_enrichment)
        session = create_session(
            config=config,
            enrichment=self._build_enrichment(config),
            persistence=JsonFileSnapshotStore(self.save_file) if self.save_file else None,
            rng=random.Random(self.seed) if self.seed is not None else None,
        )
        session.on(ResponseAction.EXIT_SYSTEM, self._on_exit_system)
        return session

    def _on_exit_system(self, response: Response) -> None:
        print("[connection closed]")

    def _print_entries(self, session: GameSession) -> None:
        for entry in session.log:
            print(entry.text)
        print()

    async def run(self) -> None:
        """Run the interactive REPL."""
        session = self.build_session()
        if session.load():
            print("Save file loaded.")

        session.show_welcome()
        self._print_entries(session)

        while self.running:
            try:
                user_input = input(PROMPT).strip()

                if not user_input:
                    continue

                if user_input.lower() in ("quit", "logout"):
                    self.running = False
                    continue

                response = await session.submit(user_input)
                if response is not None:
                    print(response.text)
                    print()

            except KeyboardInterrupt:
                print("\n")
                self.running = False
            except EOFError:
                print("\n")
                self.running = False

        session.save()
        print("Session terminated. Stay hidden, Rogue.")


def run_game(
    save_file: Path | None = DEFAULT_SAVE_PATH,
    use_enrichment: bool = True,
    mock_llm: bool = False,
    seed: int | None = None,
) -> None:
    """
    Run the RogueCode terminal.

    Args:
        save_file: Where to keep the save, or None for no persistence
        use_enrichment: Whether to ask the LLM for narrative text
        mock_llm: Use the offline mock provider instead of Groq
        seed: Seed for reproducible outcomes
    """
    repl = GameREPL(
        save_file=save_file,
        use_enrichment=use_enrichment,
        mock_llm=mock_llm,
        seed=seed,
    )
    asyncio.run(repl.run())


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="RogueCode hacking simulator")
    parser.add_argument(
        "--save-file",
        type=Path,
        default=DEFAULT_SAVE_PATH,
        help=f"Save file location (default: {DEFAULT_SAVE_PATH})",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Disable persistence",
    )
    parser.add_argument(
        "--no-enrichment",
        action="store_true",
        help="Use local generation only",
    )
    parser.add_argument(
        "--mock-llm",
        action="store_true",
        help="Use the offline mock LLM provider",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_game(
        save_file=None if args.no_save else args.save_file,
        use_enrichment=not args.no_enrichment,
        mock_llm=args.mock_llm,
        seed=args.seed,
    )


if __name__ == "__main__":
    main()
