"""Player progression service: XP, leveling, credits and reputation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from roguecode.models.player import (
    BASE_XP_TO_NEXT_LEVEL,
    DEFAULT_STARTING_CREDITS,
    Player,
    StatChange,
    XPGain,
    next_threshold,
)

logger = logging.getLogger(__name__)


@dataclass
class ProgressionService:
    """
    Owns the player record and the leveling curve.

    All mutations of level, XP, credits and reputation go through this
    service, so the invariant ``0 <= xp < xp_to_next_level`` holds after
    every call.
    """

    player: Player = field(default_factory=Player)
    starting_credits: int = DEFAULT_STARTING_CREDITS

    def add_xp(self, amount: int) -> XPGain:
        """
        Add XP, leveling up as many times as the total allows.

        Args:
            amount: Non-negative XP to grant

        Returns:
            XPGain with the before and after values

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"XP amount must be non-negative, got {amount}")

        player = self.player
        previous = (player.level, player.xp, player.xp_to_next_level)

        level, xp, threshold = player.level, player.xp + amount, player.xp_to_next_level
        levels_gained = 0
        while xp >= threshold:
            xp -= threshold
            level += 1
            threshold = next_threshold(threshold)
            levels_gained += 1

        player.level = level
        player.xp = xp
        player.xp_to_next_level = threshold

        if levels_gained:
            logger.info(f"Player leveled up: {previous[0]} -> {level}")

        return XPGain(
            amount=amount,
            previous_level=previous[0],
            previous_xp=previous[1],
            previous_xp_to_next_level=previous[2],
            level=level,
            xp=xp,
            xp_to_next_level=threshold,
            leveled_up=levels_gained > 0,
            levels_gained=levels_gained,
        )

    def grant_credits(self, amount: int) -> StatChange:
        """Add credits. No ceiling."""
        if amount < 0:
            raise ValueError(f"Credit amount must be non-negative, got {amount}")
        before = self.player.credits
        self.player.credits = before + amount
        return StatChange(before=before, after=self.player.credits)

    def grant_reputation(self, amount: int) -> StatChange:
        """Add reputation. No ceiling."""
        if amount < 0:
            raise ValueError(f"Reputation amount must be non-negative, got {amount}")
        before = self.player.reputation
        self.player.reputation = before + amount
        return StatChange(before=before, after=self.player.reputation)

    def repair_consistency(self) -> XPGain:
        """
        Recompute level, XP and threshold from lifetime XP.

        Replays the leveling loop from level 1 using the total XP implied
        by the current level and XP. Fixes records where a direct write
        left ``xp >= xp_to_next_level`` or a stale threshold. Idempotent.
        """
        player = self.player
        previous = (player.level, player.xp, player.xp_to_next_level)
        total = player.total_xp

        player.level = 1
        player.xp = 0
        player.xp_to_next_level = BASE_XP_TO_NEXT_LEVEL
        replay = self.add_xp(total)

        logger.info(
            "Progression repaired: level %d xp %d/%d -> level %d xp %d/%d",
            *previous,
            replay.level,
            replay.xp,
            replay.xp_to_next_level,
        )

        return XPGain(
            amount=0,
            previous_level=previous[0],
            previous_xp=previous[1],
            previous_xp_to_next_level=previous[2],
            level=replay.level,
            xp=replay.xp,
            xp_to_next_level=replay.xp_to_next_level,
            leveled_up=replay.level > previous[0],
            levels_gained=max(0, replay.level - previous[0]),
        )

    def reset(self) -> Player:
        """
        Restore the player to a fresh record.

        Skills, inventory and completed missions are cleared along with
        the numeric stats.
        """
        self.player = Player(credits=self.starting_credits)
        logger.info("Player progression reset")
        return self.player

    def add_skill(self, skill_id: str) -> bool:
        """Unlock a skill. Returns False if it was already unlocked."""
        if skill_id in self.player.skills:
            return False
        self.player.skills.add(skill_id)
        return True

    def add_item(self, item: str) -> None:
        """Add an item to the inventory."""
        self.player.inventory.append(item)

    def record_completed_mission(self, mission_id: str) -> None:
        self.player.completed_missions.add(mission_id)

    # Persistence

    def snapshot(self) -> dict[str, Any]:
        """Serializable copy of the player record."""
        return self.player.model_dump(mode="json")

    def restore(self, blob: dict[str, Any]) -> None:
        """Replace the player record from a snapshot."""
        self.player = Player.model_validate(blob)
