from __future__ import annotations

from abc import ABC, abstractmethod


class LLMProvider(ABC):
    @abstractmethod
    async def generate(self, prompt: str, model: str | None = None, temperature: float = 0.7) -> str:
        """Return the raw completion text. *model* overrides the default model."""
        ...

    @abstractmethod
    def name(self) -> str:
        ...
