"""
JSON file persistence for RogueCode saves.

Stores the whole game snapshot in a single UTF-8 JSON document.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SAVE_PATH = Path.home() / ".roguecode" / "save.json"


class JsonFileSnapshotStore:
    """Persistence collaborator backed by a JSON file."""

    def __init__(self, path: Path | str = DEFAULT_SAVE_PATH) -> None:
        self.path = Path(path)

    def save(self, blob: dict[str, Any]) -> None:
        """Write the snapshot, replacing the file atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(blob, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
        logger.debug(f"Saved game to {self.path}")

    def load(self) -> dict[str, Any] | None:
        """
        Read the snapshot.

        Returns:
            The saved blob, or None if no save file exists

        Raises:
            ValueError: If the file is not a JSON object
        """
        if not self.path.exists():
            return None

        try:
            blob = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Corrupt save file {self.path}: {e}") from e

        if not isinstance(blob, dict):
            raise ValueError(f"Corrupt save file {self.path}: expected an object")
        return blob
