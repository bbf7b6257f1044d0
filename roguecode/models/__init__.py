"""
Core Data Models for RogueCode.

These models define the persistent records of the game:
- Player progression (level, XP, credits, reputation)
- Missions and their lifecycle
- Targets, injected payloads, and the current connection
"""

from roguecode.models.mission import (
    LEGAL_TRANSITIONS,
    InvalidTransitionError,
    Mission,
    MissionStatus,
    MissionType,
    can_transition,
)
from roguecode.models.player import (
    BASE_XP_TO_NEXT_LEVEL,
    DEFAULT_STARTING_CREDITS,
    XP_GROWTH_FACTOR,
    Player,
    StatChange,
    XPGain,
    lifetime_xp,
    next_threshold,
)
from roguecode.models.target import (
    DEVICE_PREFIXES,
    Injection,
    SystemConnection,
    Target,
    TargetKind,
    infer_target_kind,
    normalize_target,
)

__all__ = [
    # Player
    "Player",
    "XPGain",
    "StatChange",
    "BASE_XP_TO_NEXT_LEVEL",
    "DEFAULT_STARTING_CREDITS",
    "XP_GROWTH_FACTOR",
    "lifetime_xp",
    "next_threshold",
    # Mission
    "Mission",
    "MissionStatus",
    "MissionType",
    "LEGAL_TRANSITIONS",
    "InvalidTransitionError",
    "can_transition",
    # Target
    "Target",
    "TargetKind",
    "Injection",
    "SystemConnection",
    "DEVICE_PREFIXES",
    "infer_target_kind",
    "normalize_target",
]
