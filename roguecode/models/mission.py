"""
Mission models for RogueCode.

Defines contracts handed to the player, their lifecycle, and the
legal status transitions:

    available --accept--> active --complete--> completed
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field


class MissionType(str, Enum):
    """Categories of missions that can be generated."""

    INFILTRATION = "INFILTRATION"
    DATA_THEFT = "DATA_THEFT"
    SABOTAGE = "SABOTAGE"
    SURVEILLANCE = "SURVEILLANCE"
    EXTRACTION = "EXTRACTION"
    DEFENSE = "DEFENSE"
    RECOVERY = "RECOVERY"


class MissionStatus(str, Enum):
    """Status of a mission in the player's log."""

    AVAILABLE = "available"  # Generated, waiting to be accepted
    ACTIVE = "active"  # Accepted, in progress
    COMPLETED = "completed"  # Terminal, rewards applied


LEGAL_TRANSITIONS: dict[MissionStatus, set[MissionStatus]] = {
    MissionStatus.AVAILABLE: {MissionStatus.ACTIVE},
    MissionStatus.ACTIVE: {MissionStatus.COMPLETED},
    MissionStatus.COMPLETED: set(),
}


class InvalidTransitionError(ValueError):
    """Raised when a mission status change skips or reverses the lifecycle."""

    def __init__(self, mission_id: str, current: MissionStatus, requested: MissionStatus) -> None:
        self.mission_id = mission_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Mission {mission_id} cannot move from {current.value} to {requested.value}"
        )


def can_transition(current: MissionStatus, requested: MissionStatus) -> bool:
    """Check whether a status change follows the mission lifecycle."""
    return requested in LEGAL_TRANSITIONS[current]


class Mission(BaseModel):
    """
    A contract the player can accept and complete for rewards.

    Rewards are fixed at generation time and applied exactly once,
    when the mission moves to COMPLETED.
    """

    id: str | None = None
    """Assigned by the world store (``mission-N``) when absent."""

    title: str
    type: MissionType
    description: str
    objective: str
    target: str
    difficulty: Annotated[int, Field(ge=1, le=5)] = 1
    """1 = routine, 5 = only our best operatives."""

    xp_reward: int = Field(default=0, ge=0)
    credit_reward: int = Field(default=0, ge=0)
    reputation_reward: int = Field(default=0, ge=0)

    status: MissionStatus = MissionStatus.AVAILABLE

    time_limit: int = Field(default=0, ge=0, description="Seconds; flavor only")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    accepted_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status == MissionStatus.COMPLETED

    def rewards_summary(self) -> str:
        """One-line reward description."""
        return (
            f"{self.xp_reward} XP, {self.credit_reward} credits, "
            f"{self.reputation_reward} reputation"
        )
