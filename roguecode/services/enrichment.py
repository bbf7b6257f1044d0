"""
Narrative enrichment contract for RogueCode.

The enrichment provider is an optional text generator. Every call is
wrapped by request_enrichment, which turns timeouts, errors, empty text
and the "unavailable" sentinel into Enrichment.unavailable(...) so the
caller can fall back to local generation.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from enum import Enum
from typing import Protocol

from pydantic import BaseModel

from roguecode.services.llm import UNAVAILABLE_MARKER

logger = logging.getLogger(__name__)

DEFAULT_ENRICHMENT_TIMEOUT = 8.0


class EnrichmentProvider(Protocol):
    """Optional collaborator that writes richer narrative text."""

    async def get_scan_narrative(self, target: str, *, deep: bool = False, vulns: bool = False) -> str:
        ...

    async def get_mission_briefing(self, mission_type: str, difficulty: int) -> str:
        ...


class EnrichmentStatus(str, Enum):
    SUCCESS = "success"
    UNAVAILABLE = "unavailable"


class Enrichment(BaseModel):
    """Outcome of an enrichment request."""

    status: EnrichmentStatus
    text: str = ""
    reason: str | None = None

    @classmethod
    def success(cls, text: str) -> Enrichment:
        return cls(status=EnrichmentStatus.SUCCESS, text=text)

    @classmethod
    def unavailable(cls, reason: str) -> Enrichment:
        return cls(status=EnrichmentStatus.UNAVAILABLE, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status == EnrichmentStatus.SUCCESS


async def request_enrichment(
    call: Awaitable[str],
    timeout: float = DEFAULT_ENRICHMENT_TIMEOUT,
) -> Enrichment:
    """
    Await a provider call, never letting it fail outward.

    Args:
        call: The pending provider coroutine
        timeout: Seconds to wait before giving up

    Returns:
        Enrichment.success with the text, or Enrichment.unavailable
    """
    try:
        text = await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Enrichment timed out after {timeout}s, using local generation")
        return Enrichment.unavailable(f"timed out after {timeout}s")
    except Exception as e:
        logger.warning(f"Enrichment failed, using local generation: {e}")
        return Enrichment.unavailable(str(e) or type(e).__name__)

    if not isinstance(text, str) or not text.strip():
        logger.warning("Enrichment returned empty text, using local generation")
        return Enrichment.unavailable("empty response")

    if text.strip().startswith(UNAVAILABLE_MARKER):
        logger.info(f"Enrichment provider unavailable: {text.strip()}")
        return Enrichment.unavailable(text.strip())

    return Enrichment.success(text.strip())
