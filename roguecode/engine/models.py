"""
Engine Data Models for RogueCode.

Defines the transient values of the command loop:
- Command: Parsed player input
- Response: Narrated outcome of a command
- EngineConfig: Tunables for a session
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from roguecode.models.player import DEFAULT_STARTING_CREDITS


class Command(BaseModel):
    """A parsed input line."""

    action: str | None = Field(default=None, description="Lower-cased verb, None for blank input")
    args: list[str] = Field(default_factory=list)
    flags: dict[str, bool] = Field(default_factory=dict)

    def has_flag(self, *names: str) -> bool:
        """Whether any of the named flags is set."""
        return any(self.flags.get(name) for name in names)


class ResponseType(str, Enum):
    """Severity of a response, used by the UI for coloring."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    SYSTEM = "system"


class ResponseAction(str, Enum):
    """Side-effect tags interpreted by the session shell."""

    # Panels
    OPEN_HELP_PANEL = "OPEN_HELP_PANEL"
    OPEN_SETTINGS_PANEL = "OPEN_SETTINGS_PANEL"
    OPEN_SKILL_TREE = "OPEN_SKILL_TREE"
    OPEN_INVENTORY = "OPEN_INVENTORY"

    # Terminal
    CLEAR_TERMINAL = "CLEAR_TERMINAL"

    # Missions
    LIST_MISSIONS = "LIST_MISSIONS"
    MISSION_GENERATED = "MISSION_GENERATED"
    MISSION_ACCEPTED = "MISSION_ACCEPTED"
    MISSION_COMPLETED = "MISSION_COMPLETED"

    # Operations
    START_DEEP_SCAN = "START_DEEP_SCAN"
    INJECTION_SUCCESS = "INJECTION_SUCCESS"
    HACK_SUCCESS = "HACK_SUCCESS"
    HACK_FAILURE = "HACK_FAILURE"
    DECRYPT_SUCCESS = "DECRYPT_SUCCESS"
    ANALYZE_COMPLETE = "ANALYZE_COMPLETE"

    # Connection
    CONNECT_SYSTEM = "CONNECT_SYSTEM"
    EXIT_SYSTEM = "EXIT_SYSTEM"

    # Upgrades
    UPGRADE_AI = "UPGRADE_AI"
    UPGRADE_FIREWALL = "UPGRADE_FIREWALL"
    UPGRADE_TOOLKIT = "UPGRADE_TOOLKIT"

    # Maintenance
    STATS_RESET = "STATS_RESET"
    GAME_RESET = "GAME_RESET"


class Response(BaseModel):
    """Result returned to the player for one command."""

    text: str
    type: ResponseType = ResponseType.INFO
    action: ResponseAction | None = None
    payload: dict[str, Any] | None = Field(
        default=None, description="Auxiliary data, e.g. the record just created"
    )

    @classmethod
    def info(cls, text: str, **kwargs: Any) -> Response:
        return cls(text=text, type=ResponseType.INFO, **kwargs)

    @classmethod
    def success(cls, text: str, **kwargs: Any) -> Response:
        return cls(text=text, type=ResponseType.SUCCESS, **kwargs)

    @classmethod
    def error(cls, text: str, **kwargs: Any) -> Response:
        return cls(text=text, type=ResponseType.ERROR, **kwargs)

    @classmethod
    def warning(cls, text: str, **kwargs: Any) -> Response:
        return cls(text=text, type=ResponseType.WARNING, **kwargs)

    @classmethod
    def system(cls, text: str, **kwargs: Any) -> Response:
        return cls(text=text, type=ResponseType.SYSTEM, **kwargs)

    @property
    def is_error(self) -> bool:
        return self.type == ResponseType.ERROR


class EngineConfig(BaseModel):
    """Engine configuration."""

    # Progression
    starting_credits: int = Field(default=DEFAULT_STARTING_CREDITS, ge=0)

    # Enrichment settings
    use_enrichment: bool = True
    enrichment_timeout: float = Field(default=8.0, gt=0, description="Seconds")
    llm_max_tokens: int = 500
    llm_temperature: float = 0.7

    # Persistence
    autosave: bool = True
