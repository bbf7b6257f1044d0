"""
Service layer for RogueCode.

Services own progression rules, local content generation and the
optional narrative enrichment provider.
"""

from __future__ import annotations

from roguecode.services.enrichment import (
    Enrichment,
    EnrichmentProvider,
    EnrichmentStatus,
    request_enrichment,
)
from roguecode.services.llm import (
    LLMService,
    MockLLMProvider,
    OpenAICompatibleProvider,
    create_llm_service,
)
from roguecode.services.missions import MissionGenerator
from roguecode.services.progression import ProgressionService
from roguecode.services.recon import ReconService, ScanReport, TraceProfile

__all__ = [
    # Progression
    "ProgressionService",
    # Content generation
    "MissionGenerator",
    "ReconService",
    "ScanReport",
    "TraceProfile",
    # Enrichment
    "Enrichment",
    "EnrichmentProvider",
    "EnrichmentStatus",
    "request_enrichment",
    "LLMService",
    "MockLLMProvider",
    "OpenAICompatibleProvider",
    "create_llm_service",
]
