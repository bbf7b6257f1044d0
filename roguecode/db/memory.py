"""
In-memory implementations of the storage interfaces.

InMemoryWorldStore is the world state store used by a game session;
InMemorySnapshotStore stands in for real persistence in tests.
"""

from __future__ import annotations

import logging
from copy import deepcopy
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from roguecode.models import (
    Injection,
    InvalidTransitionError,
    Mission,
    MissionStatus,
    StatChange,
    SystemConnection,
    Target,
    XPGain,
    can_transition,
    normalize_target,
)
from roguecode.services.progression import ProgressionService

logger = logging.getLogger(__name__)


class MissionCompletion(BaseModel):
    """Result of completing a mission: the record and the rewards applied."""

    mission: Mission
    xp: XPGain
    credits: StatChange
    reputation: StatChange


class InMemoryWorldStore:
    """
    Keyed-record store for missions, targets and injections.

    Records are copied on the way in and out so callers never hold
    references into the store.
    """

    def __init__(self) -> None:
        self._missions: dict[str, Mission] = {}
        self._targets: dict[str, Target] = {}
        self._injections: dict[str, Injection] = {}
        self._current_system: SystemConnection | None = None

    # Mission operations
    def add_mission(self, mission: Mission) -> str:
        """Insert a mission, assigning ``mission-N`` if it has no id."""
        record = mission.model_copy(deep=True)
        if record.id is None:
            record.id = f"mission-{self._next_mission_number()}"
        if record.id in self._missions:
            raise ValueError(f"Mission '{record.id}' already exists")
        self._missions[record.id] = record
        return record.id

    def _next_mission_number(self) -> int:
        """One past the highest ``mission-N`` id in the store."""
        highest = 0
        for mission_id in self._missions:
            prefix, _, number = mission_id.partition("-")
            if prefix == "mission" and number.isdigit():
                highest = max(highest, int(number))
        return highest + 1

    def get_mission(self, mission_id: str) -> Mission | None:
        mission = self._missions.get(mission_id)
        return mission.model_copy(deep=True) if mission else None

    def list_missions(self, status: MissionStatus | None = None) -> list[Mission]:
        """Missions in insertion order, optionally filtered by status."""
        return [
            m.model_copy(deep=True)
            for m in self._missions.values()
            if status is None or m.status == status
        ]

    def set_mission_status(self, mission_id: str, status: MissionStatus) -> Mission | None:
        """
        Move a mission to a new status.

        Returns:
            The updated mission, or None if the id is unknown

        Raises:
            InvalidTransitionError: If the change skips or reverses the lifecycle
        """
        mission = self._missions.get(mission_id)
        if mission is None:
            return None

        if not can_transition(mission.status, status):
            raise InvalidTransitionError(mission_id, mission.status, status)

        mission.status = status
        if status == MissionStatus.ACTIVE:
            mission.accepted_at = datetime.utcnow()
        elif status == MissionStatus.COMPLETED:
            mission.completed_at = datetime.utcnow()

        logger.info(f"Mission {mission_id} is now {status.value}")
        return mission.model_copy(deep=True)

    def complete_mission(
        self, mission_id: str, progression: ProgressionService
    ) -> MissionCompletion | None:
        """
        Complete an active mission and apply its rewards.

        Returns None without mutating anything if the mission is unknown
        or not active.
        """
        mission = self._missions.get(mission_id)
        if mission is None or mission.status != MissionStatus.ACTIVE:
            return None

        completed = self.set_mission_status(mission_id, MissionStatus.COMPLETED)
        if completed is None:
            return None

        xp = progression.add_xp(completed.xp_reward)
        credits = progression.grant_credits(completed.credit_reward)
        reputation = progression.grant_reputation(completed.reputation_reward)
        progression.record_completed_mission(mission_id)

        return MissionCompletion(
            mission=completed,
            xp=xp,
            credits=credits,
            reputation=reputation,
        )

    # Target operations
    def upsert_target(self, target: Target) -> Target:
        """Insert or update a target. A hacked target stays hacked."""
        record = target.model_copy(deep=True)
        record.id = normalize_target(record.id or record.name)

        existing = self._targets.get(record.id)
        if existing is not None and existing.hacked and not record.hacked:
            record.hacked = True
            record.hacked_at = existing.hacked_at

        self._targets[record.id] = record
        return record.model_copy(deep=True)

    def get_target(self, target_id: str) -> Target | None:
        target = self._targets.get(normalize_target(target_id))
        return target.model_copy(deep=True) if target else None

    def list_targets(self) -> list[Target]:
        return [t.model_copy(deep=True) for t in self._targets.values()]

    # Injection operations
    def add_injection(self, injection: Injection) -> str:
        record = injection.model_copy(deep=True)
        record.target = normalize_target(record.target)
        self._injections[record.id] = record
        return record.id

    def list_injections(self) -> list[Injection]:
        return [i.model_copy(deep=True) for i in self._injections.values()]

    def has_injection_for(self, target: str) -> bool:
        key = normalize_target(target)
        return any(i.target == key for i in self._injections.values())

    # Connection
    def get_current_system(self) -> SystemConnection | None:
        return self._current_system.model_copy() if self._current_system else None

    def set_current_system(self, system: SystemConnection | None) -> None:
        self._current_system = system.model_copy() if system else None

    # Whole-store operations
    def clear(self) -> None:
        """Remove every record."""
        self._missions.clear()
        self._targets.clear()
        self._injections.clear()
        self._current_system = None
        logger.info("World state cleared")

    def snapshot(self) -> dict[str, Any]:
        """Serializable copy of the whole store."""
        return {
            "missions": [m.model_dump(mode="json") for m in self._missions.values()],
            "targets": [t.model_dump(mode="json") for t in self._targets.values()],
            "injections": [i.model_dump(mode="json") for i in self._injections.values()],
            "current_system": (
                self._current_system.model_dump(mode="json") if self._current_system else None
            ),
        }

    def restore(self, blob: dict[str, Any]) -> None:
        """
        Replace the whole store from a snapshot.

        Every record is validated before anything is replaced, so a bad
        snapshot leaves the store untouched.

        Raises:
            ValueError: If the snapshot or one of its records is malformed
        """
        if not isinstance(blob, dict):
            raise ValueError("World snapshot must be an object")

        missions = [Mission.model_validate(m) for m in _section(blob, "missions")]
        targets = [Target.model_validate(t) for t in _section(blob, "targets")]
        injections = [Injection.model_validate(i) for i in _section(blob, "injections")]
        current = blob.get("current_system")
        system = SystemConnection.model_validate(current) if current else None

        self._missions = {m.id: m for m in missions if m.id is not None}
        self._targets = {t.id: t for t in targets}
        self._injections = {i.id: i for i in injections}
        self._current_system = system


def _section(blob: dict[str, Any], key: str) -> list[Any]:
    records = blob.get(key, [])
    if not isinstance(records, list):
        raise ValueError(f"World snapshot section '{key}' must be a list")
    return records


class InMemorySnapshotStore:
    """Persistence collaborator that keeps the last snapshot in memory."""

    def __init__(self) -> None:
        self._blob: dict[str, Any] | None = None
        self.save_count = 0

    def save(self, blob: dict[str, Any]) -> None:
        self._blob = deepcopy(blob)
        self.save_count += 1

    def load(self) -> dict[str, Any] | None:
        return deepcopy(self._blob) if self._blob is not None else None
