from __future__ import annotations

import logging
import os
import re
import time

import httpx

from vocalab.providers.base import LLMProvider

log = logging.getLogger("vocalab.llm")

_KEY_RE = re.compile(r"(AIza[0-9A-Za-z\-_]{35})")


def clean_api_key(raw: str) -> str:
    """Recover a Gemini key from a sloppy env value (quotes, whitespace, prefixes)."""
    m = _KEY_RE.search(raw)
    if m:
        return m.group(1)
    key = raw.strip()
    if len(key) >= 2 and key[0] == key[-1] and key[0] in "\"'":
        key = key[1:-1]
    return key


class GeminiProvider(LLMProvider):
    def __init__(
        self,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com",
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if api_key is None:
            api_key = os.environ.get("GEMINI_API_KEY", "")
        self.api_key = clean_api_key(api_key)
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._transport = transport

    async def generate(self, prompt: str, model: str | None = None, temperature: float = 0.7) -> str:
        if not self.api_key:
            raise RuntimeError("GEMINI_API_KEY is not configured")
        model = model or self.model
        log.debug("── PROMPT (%s) ──\n%s", model, prompt)
        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=120.0, transport=self._transport) as client:
            resp = await client.post(
                f"{self.base_url}/v1beta/models/{model}:generateContent",
                headers={"x-goog-api-key": self.api_key},
                json={
                    "contents": [{"parts": [{"text": prompt}]}],
                    "generationConfig": {"temperature": temperature},
                },
            )
            resp.raise_for_status()
            data = resp.json()
        elapsed = time.monotonic() - t0

        candidates = data.get("candidates") or []
        if not candidates:
            reason = data.get("promptFeedback", {}).get("blockReason", "no candidates")
            raise RuntimeError(f"Gemini returned no text ({reason})")
        parts = candidates[0].get("content", {}).get("parts", [])
        response = "".join(p.get("text", "") for p in parts)
        log.info("Gemini %s answered (%.1fs, %d chars)", model, elapsed, len(response))
        log.debug("── RESPONSE ──\n%s", response)
        return response

    def name(self) -> str:
        return f"gemini/{self.model}"
