from __future__ import annotations

import logging
import time

import httpx

from vocalab.providers.base import LLMProvider

log = logging.getLogger("vocalab.llm")


class OllamaProvider(LLMProvider):
    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "qwen3:8b",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._transport = transport

    async def generate(self, prompt: str, model: str | None = None, temperature: float = 0.7) -> str:
        model = model or self.model
        log.debug("── PROMPT (%s) ──\n%s", model, prompt)
        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=120.0, transport=self._transport) as client:
            resp = await client.post(
                f"{self.base_url}/api/generate",
                json={
                    "model": model,
                    "prompt": prompt,
                    "temperature": temperature,
                    "stream": False,
                    "think": False,
                },
            )
            resp.raise_for_status()
            data = resp.json()
        elapsed = time.monotonic() - t0
        response = data["response"]
        tokens = data.get("eval_count", "?")
        log.info("Ollama %s answered (%.1fs, %s tokens)", model, elapsed, tokens)
        log.debug("── RESPONSE ──\n%s", response)
        return response

    def name(self) -> str:
        return f"ollama/{self.model}"
