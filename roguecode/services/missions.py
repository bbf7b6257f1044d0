"""
Mission Generation Service for RogueCode.

Generates procedural missions from templates, scaled to the player's
level. Narrative briefings from the enrichment provider are layered
on top by the resolver; this service is the local fallback and always
produces a complete mission.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from roguecode.models.mission import Mission, MissionType

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5

# Base rewards, multiplied by difficulty and a 0.8-1.2 spread
BASE_XP_REWARD = 100
BASE_CREDIT_REWARD = 200
BASE_REPUTATION_REWARD = 1
REWARD_SPREAD_MIN = 0.8
REWARD_SPREAD_WIDTH = 0.4

SECONDS_PER_DIFFICULTY = 10 * 60


# =============================================================================
# Mission Templates by Type
# =============================================================================


@dataclass
class MissionTemplateData:
    """Template data for procedural mission generation."""

    mission_type: MissionType
    title_patterns: list[str]
    objectives: list[str]


_MISSION_TEMPLATES: dict[MissionType, MissionTemplateData] = {
    MissionType.INFILTRATION: MissionTemplateData(
        mission_type=MissionType.INFILTRATION,
        title_patterns=[
            "Silent Entry: {target}",
            "Breach Protocol: {target}",
            "Ghost Access: {target}",
            "Shadow Infiltration: {target}",
        ],
        objectives=[
            "Gain access to the internal network",
            "Bypass security systems",
            "Plant a backdoor in the system",
            "Establish persistent access",
        ],
    ),
    MissionType.DATA_THEFT: MissionTemplateData(
        mission_type=MissionType.DATA_THEFT,
        title_patterns=[
            "Data Extraction: {target}",
            "Memory Heist: {target}",
            "Digital Larceny: {target}",
            "Information Raid: {target}",
        ],
        objectives=[
            "Download confidential documents",
            "Extract customer database",
            "Retrieve encryption keys",
            "Copy proprietary algorithms",
        ],
    ),
    MissionType.SABOTAGE: MissionTemplateData(
        mission_type=MissionType.SABOTAGE,
        title_patterns=[
            "System Corruption: {target}",
            "Network Takedown: {target}",
            "Chaos Protocol: {target}",
            "Disrupt Operations: {target}",
        ],
        objectives=[
            "Corrupt system files",
            "Disable security protocols",
            "Plant false information",
            "Trigger system failures",
        ],
    ),
    MissionType.SURVEILLANCE: MissionTemplateData(
        mission_type=MissionType.SURVEILLANCE,
        title_patterns=[
            "Silent Observer: {target}",
            "Digital Shadows: {target}",
            "Watchful Eye: {target}",
            "Network Monitor: {target}",
        ],
        objectives=[
            "Monitor network traffic",
            "Intercept communications",
            "Track target activities",
            "Gather intelligence",
        ],
    ),
    MissionType.EXTRACTION: MissionTemplateData(
        mission_type=MissionType.EXTRACTION,
        title_patterns=[
            "Asset Recovery: {target}",
            "Secure Extraction: {target}",
            "Retrieval Operation: {target}",
            "Recovery Protocol: {target}",
        ],
        objectives=[
            "Retrieve compromised agent data",
            "Recover stolen technology",
            "Extract undercover operative",
            "Secure sensitive information",
        ],
    ),
    MissionType.DEFENSE: MissionTemplateData(
        mission_type=MissionType.DEFENSE,
        title_patterns=[
            "Digital Fortress: {target}",
            "Firewall Guardian: {target}",
            "System Defense: {target}",
            "Security Protocol: {target}",
        ],
        objectives=[
            "Protect critical infrastructure",
            "Counter incoming cyber attacks",
            "Secure vulnerable systems",
            "Eliminate security breaches",
        ],
    ),
    MissionType.RECOVERY: MissionTemplateData(
        mission_type=MissionType.RECOVERY,
        title_patterns=[
            "Data Salvage: {target}",
            "System Restoration: {target}",
            "Recovery Operation: {target}",
            "Digital Archaeology: {target}",
        ],
        objectives=[
            "Recover deleted files",
            "Restore corrupted data",
            "Retrieve backup archives",
            "Salvage damaged systems",
        ],
    ),
}

MISSION_TARGETS = [
    "MegaCorp HQ",
    "NeoBank Systems",
    "Quantum Research Lab",
    "SynthTech Industries",
    "Global Defense Network",
    "Darkweb Server Cluster",
    "CyberSec Solutions",
    "Nexus Data Center",
    "Orbital Communications Array",
    "BlackMesa Research Facility",
]

_INTRO_PATTERNS = [
    "We have intel on {target} that requires immediate action.",
    "A high-priority operation targeting {target} has been authorized.",
    "Your expertise is needed for a mission involving {target}.",
    "An opportunity has emerged to infiltrate {target}.",
]

# Indexed by difficulty - 1
_DIFFICULTY_DESCRIPTIONS = [
    "This should be a straightforward operation with minimal security.",
    "Standard security measures are in place, but nothing you can't handle.",
    "Be prepared for enhanced security protocols and active monitoring.",
    "High-level security systems are in place. Proceed with extreme caution.",
    "Maximum security alert. Only our best operatives are assigned to this level of mission.",
]

_OBJECTIVE_PATTERNS = [
    "Your primary objective is to {objective}.",
    "You are tasked with {objective}.",
    "Mission parameters require you to {objective}.",
    "Your assignment: {objective}.",
]

_CLOSING_PATTERNS = [
    "Complete this mission with discretion. We can't afford any traces.",
    "Time is of the essence. Get in, complete the objective, and get out.",
    "Success in this mission will significantly advance our position.",
    "The data you acquire will be invaluable to our operations.",
]


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


@dataclass
class MissionGenerator:
    """
    Local template-based mission generator.

    All randomness goes through ``rng`` so tests can seed it.
    """

    rng: random.Random = field(default_factory=random.Random)

    def generate(
        self,
        player_level: int = 1,
        mission_type: MissionType | None = None,
    ) -> Mission:
        """
        Generate a mission scaled to the player's level.

        Args:
            player_level: Current player level
            mission_type: Optional specific mission type

        Returns:
            A new mission with status AVAILABLE and no id
        """
        template = _MISSION_TEMPLATES[mission_type or self.rng.choice(list(MissionType))]
        target = self.rng.choice(MISSION_TARGETS)
        objective = self.rng.choice(template.objectives)
        difficulty = self.difficulty_for_level(player_level)

        subs = {"target": target, "objective": objective.lower()}
        title = self._substitute(self.rng.choice(template.title_patterns), subs)
        description = self._describe(subs, difficulty)

        mission = Mission(
            title=title,
            type=template.mission_type,
            description=description,
            objective=objective,
            target=target,
            difficulty=difficulty,
            xp_reward=self._reward(BASE_XP_REWARD, difficulty),
            credit_reward=self._reward(BASE_CREDIT_REWARD, difficulty),
            reputation_reward=self._reward(BASE_REPUTATION_REWARD, difficulty),
            time_limit=difficulty * SECONDS_PER_DIFFICULTY,
        )
        logger.debug(f"Generated mission '{mission.title}' (difficulty {difficulty})")
        return mission

    def generate_many(self, count: int = 3, player_level: int = 1) -> list[Mission]:
        """Generate several independent missions."""
        return [self.generate(player_level) for _ in range(count)]

    def difficulty_for_level(self, player_level: int) -> int:
        """Base difficulty is half the level (1-5), jittered by one either way."""
        base = _clamp(player_level // 2, MIN_DIFFICULTY, MAX_DIFFICULTY)
        return _clamp(base + self.rng.randint(-1, 1), MIN_DIFFICULTY, MAX_DIFFICULTY)

    def _reward(self, base: int, difficulty: int) -> int:
        spread = REWARD_SPREAD_MIN + self.rng.random() * REWARD_SPREAD_WIDTH
        return int(base * difficulty * spread)

    def _describe(self, subs: dict[str, str], difficulty: int) -> str:
        parts = [
            self._substitute(self.rng.choice(_INTRO_PATTERNS), subs),
            _DIFFICULTY_DESCRIPTIONS[difficulty - 1],
            self._substitute(self.rng.choice(_OBJECTIVE_PATTERNS), subs),
            self.rng.choice(_CLOSING_PATTERNS),
        ]
        return " ".join(parts)

    def _substitute(self, pattern: str, subs: dict[str, str]) -> str:
        """Substitute placeholders in a pattern."""
        result = pattern
        for key, value in subs.items():
            result = result.replace(f"{{{key}}}", value)
        return result
