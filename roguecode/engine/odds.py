"""
Success probability model for RogueCode operations.

Every gated operation (scan, inject, hack) computes a chance from:
- a base rate for the operation or payload kind
- flag modifiers (--stealth, --quiet lower it; --force, --bruteforce raise it)
- a target-kind modifier (firewalls harder, workstations easier)
- for hack only, a bonus when a payload is already planted on the target

The sum is clamped to [MIN_SUCCESS_CHANCE, MAX_SUCCESS_CHANCE] before
the draw, so nothing is ever certain or impossible.
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel

from roguecode.models.target import TargetKind


class Operation(str, Enum):
    """Probability-gated operations."""

    SCAN = "scan"
    INJECT = "inject"
    HACK = "hack"


# =============================================================================
# Constants
# =============================================================================

MIN_SUCCESS_CHANCE = 0.1
MAX_SUCCESS_CHANCE = 0.95

BASE_RATES: dict[Operation, float] = {
    Operation.SCAN: 0.9,
    Operation.HACK: 0.6,
}

PAYLOAD_BASE_RATES: dict[str, float] = {
    "malware": 0.8,
    "virus": 0.8,
    "trojan": 0.75,
    "keylogger": 0.75,
    "spyware": 0.75,
    "worm": 0.7,
    "backdoor": 0.7,
    "rootkit": 0.6,
    "ransomware": 0.55,
}
DEFAULT_PAYLOAD_RATE = 0.65

FLAG_MODIFIERS: dict[str, float] = {
    "stealth": -0.1,
    "quiet": -0.65,
    "force": 0.15,
    "bruteforce": 0.15,
}

TARGET_MODIFIERS: dict[TargetKind, float] = {
    TargetKind.FIREWALL: -0.2,
    TargetKind.MAINFRAME: -0.25,
    TargetKind.DATABASE: -0.1,
    TargetKind.SERVER: -0.1,
    TargetKind.ROUTER: -0.05,
    TargetKind.GENERIC: 0.0,
    TargetKind.MOBILE: 0.05,
    TargetKind.IOT: 0.1,
    TargetKind.WORKSTATION: 0.1,
}

INJECTION_BONUS = 0.25


class ChanceBreakdown(BaseModel):
    """How a success chance was assembled."""

    operation: Operation
    base: float
    flag_modifier: float = 0.0
    target_modifier: float = 0.0
    injection_bonus: float = 0.0
    raw: float
    chance: float

    @property
    def clamped(self) -> bool:
        return self.raw != self.chance

    def describe(self) -> str:
        return (
            f"{self.operation.value}: base {self.base:.2f} "
            f"flags {self.flag_modifier:+.2f} target {self.target_modifier:+.2f} "
            f"injection {self.injection_bonus:+.2f} -> {self.chance:.2f}"
        )


def clamp_chance(value: float) -> float:
    return max(MIN_SUCCESS_CHANCE, min(MAX_SUCCESS_CHANCE, value))


def base_rate(operation: Operation, payload: str | None = None) -> float:
    if operation == Operation.INJECT:
        return PAYLOAD_BASE_RATES.get((payload or "").lower(), DEFAULT_PAYLOAD_RATE)
    return BASE_RATES[operation]


def success_chance(
    operation: Operation,
    *,
    flags: Mapping[str, bool] | None = None,
    target_kind: TargetKind = TargetKind.GENERIC,
    payload: str | None = None,
    has_injection: bool = False,
) -> ChanceBreakdown:
    """
    Compute the clamped success chance for an operation.

    Args:
        operation: Which gated operation is being attempted
        flags: Parsed command flags; unknown flags contribute nothing
        target_kind: Kind of the target system
        payload: Payload kind (inject only)
        has_injection: Whether a payload is planted on the target (hack only)

    Returns:
        ChanceBreakdown with each term and the final chance
    """
    base = base_rate(operation, payload)
    flag_modifier = sum(
        modifier for name, modifier in FLAG_MODIFIERS.items() if flags and flags.get(name)
    )
    target_modifier = TARGET_MODIFIERS.get(target_kind, 0.0)
    injection_bonus = INJECTION_BONUS if operation == Operation.HACK and has_injection else 0.0

    raw = round(base + flag_modifier + target_modifier + injection_bonus, 4)
    return ChanceBreakdown(
        operation=operation,
        base=base,
        flag_modifier=flag_modifier,
        target_modifier=target_modifier,
        injection_bonus=injection_bonus,
        raw=raw,
        chance=clamp_chance(raw),
    )


def roll(chance: float, rng: random.Random) -> bool:
    """Uniform draw: succeeds with probability ``chance``."""
    return rng.random() < chance
