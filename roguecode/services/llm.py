"""
LLM Service for RogueCode.

Provides BYOK (Bring Your Own Key) narrative generation through any
OpenAI-compatible API. Defaults to Groq, which serves Llama models
behind an OpenAI-compatible endpoint.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import Protocol

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

UNAVAILABLE_MARKER = "AI response unavailable"

ASSISTANT_SYSTEM_PROMPT = (
    "You are an AI assistant in a hacking game called RogueCode. "
    "Respond in character as a hacking assistant."
)


class LLMProvider(Protocol):
    """Chat-completion backend behind the narrative service."""

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str:
        """Return the assistant reply for a chat transcript."""
        ...

    @property
    def model_name(self) -> str:
        """The model being used."""
        ...

    @property
    def is_available(self) -> bool:
        """Whether the provider is configured and ready."""
        ...


@dataclass
class OpenAICompatibleProvider:
    """
    LLM provider for OpenAI-compatible chat completion APIs.

    Configuration via environment variables:
        GROQ_API_KEY: API key (required)
        GROQ_MODEL: Model to use (default: llama3-70b-8192)
        GROQ_API_URL: Custom base URL (default: Groq)
    """

    api_key: str | None = None
    model: str = "llama3-70b-8192"
    base_url: str = "https://api.groq.com/openai/v1"
    request_timeout: float = 20.0
    max_attempts: int = 2

    _client: AsyncOpenAI | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        """Initialize from environment if not provided."""
        if self.api_key is None:
            self.api_key = os.getenv("GROQ_API_KEY")

        if os.getenv("GROQ_MODEL"):
            self.model = os.getenv("GROQ_MODEL", self.model)

        if os.getenv("GROQ_API_URL"):
            self.base_url = os.getenv("GROQ_API_URL", self.base_url)

        if self.api_key:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.request_timeout,
            )

    @property
    def model_name(self) -> str:
        """The model being used."""
        return self.model

    @property
    def is_available(self) -> bool:
        """Whether the provider is configured and ready."""
        return self._client is not None

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str:
        """
        Generate a completion from messages.

        Retries empty responses and transient API errors with backoff.
        The last error is re-raised if every attempt fails.

        Raises:
            RuntimeError: If provider is not configured (no API key)
        """
        if self._client is None:
            raise RuntimeError(
                "LLM provider not configured. Set GROQ_API_KEY environment variable."
            )

        content = ""
        last_error: Exception | None = None
        for attempt in range(self.max_attempts):
            try:
                response = await self._client.chat.completions.create(
                    model=self.model,
                    messages=messages,  # type: ignore[arg-type]
                    max_tokens=max_tokens,
                    temperature=temperature,
                )
                content = response.choices[0].message.content or ""
                if content.strip():
                    return content
                last_error = None
            except Exception as e:
                # Rate limits (429), timeouts, etc. Retry after backoff.
                logger.warning(f"LLM request failed (attempt {attempt + 1}): {e}")
                last_error = e

            if attempt < self.max_attempts - 1:
                await asyncio.sleep(2.0**attempt)

        if last_error is not None:
            raise last_error
        return content


@dataclass
class MockLLMProvider:
    """Offline provider: canned replies keyed on the last user message."""

    model: str = "mock"
    responses: dict[str, str] = field(default_factory=dict)
    default_response: str = "[Mock LLM response]"
    calls: list[list[dict[str, str]]] = field(default_factory=list)

    @property
    def model_name(self) -> str:
        """The model being used."""
        return self.model

    @property
    def is_available(self) -> bool:
        """Mock provider is always available."""
        return True

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> str:
        """Return a mock response."""
        self.calls.append(messages)
        if messages:
            last_user_msg = next(
                (m["content"] for m in reversed(messages) if m["role"] == "user"),
                "",
            )
            if last_user_msg in self.responses:
                return self.responses[last_user_msg]

        return self.default_response

    def set_response(self, trigger: str, response: str) -> None:
        """Set a custom response for a specific prompt."""
        self.responses[trigger] = response


def scan_prompt(target: str, *, deep: bool, vulns: bool) -> str:
    scan_type = "deep" if deep else "standard"
    scan_for_vulns = (
        "with vulnerability assessment" if vulns else "without vulnerability assessment"
    )
    return f'Generate realistic scan results for target "{target}" using a {scan_type} scan {scan_for_vulns}.'


def briefing_prompt(mission_type: str, difficulty: int) -> str:
    return (
        f"Generate a mission briefing for a {difficulty} difficulty {mission_type} mission "
        "in a cyberpunk hacking game. Include a target, objective, and potential rewards."
    )


@dataclass
class LLMService:
    """
    High-level LLM service for narrative enrichment.

    Implements the enrichment provider contract: each method returns
    plain text, or text starting with UNAVAILABLE_MARKER when the
    provider is not configured.
    """

    provider: LLMProvider
    max_tokens: int = 500
    temperature: float = 0.7

    @property
    def is_available(self) -> bool:
        """Whether LLM features are available."""
        return self.provider.is_available

    async def get_response(
        self,
        prompt: str,
        system_prompt: str = ASSISTANT_SYSTEM_PROMPT,
        temperature: float | None = None,
    ) -> str:
        """Single-turn completion with the game's assistant persona."""
        if not self.provider.is_available:
            return f"{UNAVAILABLE_MARKER}: API key is missing"

        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ]
        return await self.provider.complete(
            messages=messages,
            max_tokens=self.max_tokens,
            temperature=self.temperature if temperature is None else temperature,
        )

    async def get_scan_narrative(self, target: str, *, deep: bool = False, vulns: bool = False) -> str:
        """
        Generate terminal-style scan output for a target.

        Args:
            target: Name of the scanned system
            deep: Whether this is a deep scan (more detail)
            vulns: Whether to include a vulnerability assessment

        Returns:
            Scan output text
        """
        system_prompt = """You are a network scanning tool in a cyberpunk hacking game.
Generate realistic scan results with the following information:
- IP Address (fictional)
- Status (Online/Offline/Firewalled)
- Operating System
- Open ports (if any)
- Services running on those ports
- Vulnerabilities (if requested)

Format the output like a terminal scan result. Be technical but concise.
If the scan is "deep", provide more detailed information."""

        return await self.get_response(
            scan_prompt(target, deep=deep, vulns=vulns),
            system_prompt=system_prompt,
            temperature=0.7,
        )

    async def get_mission_briefing(self, mission_type: str, difficulty: int) -> str:
        """
        Generate a mission briefing.

        Args:
            mission_type: Mission category (e.g. "INFILTRATION")
            difficulty: 1-5 difficulty rating

        Returns:
            Briefing text
        """
        system_prompt = f"""You are an AI mission handler in a cyberpunk hacking game called RogueCode.
Generate a detailed mission briefing with the following sections:
- Mission Name (creative and thematic)
- Target (company or system)
- Objective (what the player needs to accomplish)
- Difficulty: {difficulty}/5
- Potential Rewards (credits, reputation, items)
- Background (2-3 sentences of context)

Keep the tone serious but with cyberpunk flair. Use technical jargon where appropriate."""

        return await self.get_response(
            briefing_prompt(mission_type, difficulty),
            system_prompt=system_prompt,
            temperature=0.8,
        )


def create_llm_service(
    provider_type: str = "groq",
    *,
    max_tokens: int = 500,
    temperature: float = 0.7,
    **kwargs,
) -> LLMService:
    """
    Build the narrative service for a provider name.

    "groq" and "openai-compatible" read GROQ_API_KEY, GROQ_MODEL and
    GROQ_API_URL unless overridden in kwargs; "mock" never touches the
    network.

    Raises:
        ValueError: For an unknown provider name
    """
    provider: LLMProvider
    if provider_type == "mock":
        provider = MockLLMProvider(**kwargs)
    elif provider_type in ("groq", "openai-compatible"):
        provider = OpenAICompatibleProvider(**kwargs)
    else:
        raise ValueError(f"Unknown provider type: {provider_type}")

    return LLMService(provider=provider, max_tokens=max_tokens, temperature=temperature)
