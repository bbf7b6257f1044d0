"""
Storage interface definitions for RogueCode.

Uses Protocol classes to define the contract for world state and
persistence. Implementations can keep data in memory or on disk.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from roguecode.models import Injection, Mission, MissionStatus, SystemConnection, Target
    from roguecode.services.progression import ProgressionService
    from roguecode.db.memory import MissionCompletion


class WorldStore(Protocol):
    """
    Interface for the world state store.

    Holds missions, scanned targets, injected payloads and the current
    connection. The store is the only mutator of these records.
    """

    # Mission operations
    def add_mission(self, mission: Mission) -> str:
        """Insert a mission, assigning an id if absent. Returns the id."""
        ...

    def get_mission(self, mission_id: str) -> Mission | None:
        """Get a mission by id."""
        ...

    def list_missions(self, status: MissionStatus | None = None) -> list[Mission]:
        """Missions in insertion order, optionally filtered by status."""
        ...

    def set_mission_status(self, mission_id: str, status: MissionStatus) -> Mission | None:
        """Move a mission along its lifecycle. None if the id is unknown."""
        ...

    def complete_mission(
        self, mission_id: str, progression: ProgressionService
    ) -> MissionCompletion | None:
        """Complete an active mission and apply its rewards exactly once."""
        ...

    # Target operations
    def upsert_target(self, target: Target) -> Target:
        """Insert or update a target record."""
        ...

    def get_target(self, target_id: str) -> Target | None:
        """Get a target by id or name."""
        ...

    def list_targets(self) -> list[Target]:
        """All known targets."""
        ...

    # Injection operations
    def add_injection(self, injection: Injection) -> str:
        """Record a planted payload. Returns its id."""
        ...

    def list_injections(self) -> list[Injection]:
        """All planted payloads."""
        ...

    def has_injection_for(self, target: str) -> bool:
        """Whether any payload is planted on the target."""
        ...

    # Connection
    def get_current_system(self) -> SystemConnection | None:
        ...

    def set_current_system(self, system: SystemConnection | None) -> None:
        ...

    # Whole-store operations
    def clear(self) -> None:
        """Remove every record."""
        ...

    def snapshot(self) -> dict[str, Any]:
        """Serializable copy of the whole store."""
        ...

    def restore(self, blob: dict[str, Any]) -> None:
        """Replace the whole store from a snapshot."""
        ...


class SnapshotStore(Protocol):
    """
    Interface for the persistence collaborator.

    Decides where snapshot bytes live; the session decides when to save.
    """

    def save(self, blob: dict[str, Any]) -> None:
        """Persist a snapshot, replacing any previous one."""
        ...

    def load(self) -> dict[str, Any] | None:
        """Return the last saved snapshot, or None if there is none."""
        ...
