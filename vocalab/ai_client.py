"""Sequential model fallback over a single LLM provider.

Candidates are tried strictly one after another, in preference order.  The
first non-empty response wins; if every candidate fails the caller gets an
:class:`AIProviderExhaustedError` with the full attempt log.  Attempts are
never run in parallel since each one may be billed.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from vocalab.errors import AIProviderExhaustedError

if TYPE_CHECKING:
    from vocalab.config import Settings
    from vocalab.providers.base import LLMProvider

_log = logging.getLogger("vocalab.ai")

DEFAULT_TIMEOUT = 30.0


@dataclass
class Attempt:
    model: str
    ok: bool
    error: str = ""
    elapsed: float = 0.0


def _describe(exc: BaseException) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return "timed out"
    return str(exc) or type(exc).__name__


class AIGenerationClient:
    def __init__(
        self,
        llm: LLMProvider,
        models: Sequence[str],
        timeout: float | None = DEFAULT_TIMEOUT,
        temperature: float = 0.7,
    ):
        if not models:
            raise ValueError("at least one model is required")
        self.llm = llm
        self.models = list(models)
        self.timeout = timeout
        self.temperature = temperature
        self.attempts: list[Attempt] = []

    async def generate(self, prompt: str, temperature: float | None = None) -> str:
        """Return the raw text of the first model that answers."""
        self.attempts = []
        if temperature is None:
            temperature = self.temperature
        last_error: BaseException | None = None
        total = len(self.models)

        for i, model in enumerate(self.models, 1):
            _log.info("Attempting %s (%d/%d)", model, i, total)
            t0 = time.monotonic()
            try:
                text = await asyncio.wait_for(
                    self.llm.generate(prompt, model=model, temperature=temperature),
                    timeout=self.timeout,
                )
                if not text or not text.strip():
                    raise ValueError("empty response")
            except Exception as e:
                elapsed = time.monotonic() - t0
                last_error = e
                self.attempts.append(Attempt(model, False, _describe(e), elapsed))
                _log.warning("Failed with model %s: %s", model, _describe(e))
                continue

            self.attempts.append(Attempt(model, True, elapsed=time.monotonic() - t0))
            _log.info("  %s OK", model)
            return text

        _log.error("All %d models failed. Last error: %s", total, last_error)
        raise AIProviderExhaustedError(self.attempts, last_error)

    @property
    def models_tried(self) -> list[str]:
        return [a.model for a in self.attempts]


def create_llm(settings: Settings) -> LLMProvider:
    """Build the configured provider; its default model is the first candidate."""
    default_model = settings.ai_models[0] if settings.ai_models else None
    if settings.llm_provider == "gemini":
        from vocalab.providers.llm_gemini import GeminiProvider
        return GeminiProvider(model=default_model or "gemini-2.5-flash", base_url=settings.gemini_url)
    elif settings.llm_provider == "ollama":
        from vocalab.providers.llm_ollama import OllamaProvider
        return OllamaProvider(base_url=settings.ollama_url, model=default_model or "qwen3:8b")
    elif settings.llm_provider == "anthropic":
        from vocalab.providers.llm_anthropic import AnthropicProvider
        return AnthropicProvider(model=default_model or "claude-sonnet-4-20250514")
    elif settings.llm_provider == "openai":
        from vocalab.providers.llm_openai import OpenAIProvider
        return OpenAIProvider(model=default_model or "gpt-4o-mini")
    raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
