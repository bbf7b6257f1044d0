"""
Player progression models for RogueCode.

Defines the persistent player record and the value objects returned
by progression operations:
- Player: level, XP, credits, reputation, skills, inventory
- XPGain: before/after view of an XP grant
- StatChange: before/after view of a credit or reputation grant
"""

from __future__ import annotations

import math

from pydantic import BaseModel, Field

# =============================================================================
# Constants
# =============================================================================

BASE_XP_TO_NEXT_LEVEL = 100
XP_GROWTH_FACTOR = 1.5
DEFAULT_STARTING_CREDITS = 1000


def next_threshold(current: int) -> int:
    """XP threshold for the level after one requiring `current` XP."""
    return math.floor(current * XP_GROWTH_FACTOR)


def lifetime_xp(level: int, xp: int) -> int:
    """
    Total XP implied by a level and the XP carried into it.

    Sums the curve thresholds for levels 1..level-1, then adds the
    XP accumulated toward the next level.
    """
    total = xp
    threshold = BASE_XP_TO_NEXT_LEVEL
    for _ in range(1, level):
        total += threshold
        threshold = next_threshold(threshold)
    return total


class Player(BaseModel):
    """The player's persistent progression record."""

    level: int = Field(default=1, ge=1)
    xp: int = Field(default=0, ge=0)
    xp_to_next_level: int = Field(default=BASE_XP_TO_NEXT_LEVEL, gt=0)
    credits: int = Field(default=DEFAULT_STARTING_CREDITS, ge=0)
    reputation: int = Field(default=0, ge=0)

    skills: set[str] = Field(default_factory=set)
    """Unlocked skill and upgrade ids."""

    inventory: list[str] = Field(default_factory=list)
    """Item names, in acquisition order."""

    completed_missions: set[str] = Field(default_factory=set)

    @property
    def is_consistent(self) -> bool:
        """Whether 0 <= xp < xp_to_next_level holds."""
        return 0 <= self.xp < self.xp_to_next_level

    @property
    def total_xp(self) -> int:
        """Lifetime XP implied by the current level and XP."""
        return lifetime_xp(self.level, self.xp)


class XPGain(BaseModel):
    """Result of adding XP (or repairing progression)."""

    amount: int = Field(ge=0, description="XP granted by this call")
    previous_level: int
    previous_xp: int
    previous_xp_to_next_level: int
    level: int
    xp: int
    xp_to_next_level: int
    leveled_up: bool = False
    levels_gained: int = 0

    def describe(self) -> str:
        """Human-readable before → after summary."""
        text = (
            f"XP: {self.previous_xp}/{self.previous_xp_to_next_level}"
            f" → {self.xp}/{self.xp_to_next_level}"
        )
        if self.leveled_up:
            text += f" (Level {self.previous_level} → {self.level})"
        return text


class StatChange(BaseModel):
    """Before/after values of an additive stat grant."""

    before: int
    after: int

    @property
    def delta(self) -> int:
        return self.after - self.before
