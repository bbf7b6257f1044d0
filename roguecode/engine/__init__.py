"""
Core Engine for RogueCode.

The engine orchestrates:
- Command parsing (tokenizing player input)
- Probability gating (scan, inject and hack odds)
- Command resolution (the game's state machine)
- Session handling (turn-taking, log, hooks, autosave)
"""

from __future__ import annotations

from roguecode.engine.models import (
    Command,
    EngineConfig,
    Response,
    ResponseAction,
    ResponseType,
)
from roguecode.engine.odds import (
    INJECTION_BONUS,
    MAX_SUCCESS_CHANCE,
    MIN_SUCCESS_CHANCE,
    ChanceBreakdown,
    Operation,
    roll,
    success_chance,
)
from roguecode.engine.parser import CommandParser, parse_command
from roguecode.engine.resolver import CommandResolver
from roguecode.engine.session import GameSession, LogEntry, create_session

__all__ = [
    # Models
    "Command",
    "EngineConfig",
    "Response",
    "ResponseAction",
    "ResponseType",
    # Parser
    "CommandParser",
    "parse_command",
    # Odds
    "ChanceBreakdown",
    "Operation",
    "INJECTION_BONUS",
    "MAX_SUCCESS_CHANCE",
    "MIN_SUCCESS_CHANCE",
    "roll",
    "success_chance",
    # Resolver
    "CommandResolver",
    # Session
    "GameSession",
    "LogEntry",
    "create_session",
]
