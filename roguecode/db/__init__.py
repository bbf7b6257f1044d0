"""
Storage layer for RogueCode.

Provides:
- Protocol interfaces for the world store and persistence
- In-memory world store (the session's source of truth)
- JSON file persistence for saves
"""

from roguecode.db.interfaces import SnapshotStore, WorldStore
from roguecode.db.json_file import JsonFileSnapshotStore
from roguecode.db.memory import InMemorySnapshotStore, InMemoryWorldStore, MissionCompletion

__all__ = [
    # Interfaces
    "SnapshotStore",
    "WorldStore",
    # Implementations
    "InMemorySnapshotStore",
    "InMemoryWorldStore",
    "JsonFileSnapshotStore",
    "MissionCompletion",
]
