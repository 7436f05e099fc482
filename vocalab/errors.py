"""Error types raised by the quiz pipeline."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vocalab.ai_client import Attempt


class VocabError(Exception):
    """Base class for pipeline errors."""


class InsufficientDataError(VocabError):
    def __init__(self, available: int, required: int = 4):
        self.available = available
        self.required = required
        super().__init__(
            f"Not enough words to generate a quiz (need at least {required}, have {available})"
        )


class AIProviderExhaustedError(VocabError):
    """Every candidate model failed.

    ``attempts`` lists each model tried, in order; ``last_error`` is the
    exception raised by the final candidate.
    """

    def __init__(self, attempts: list[Attempt], last_error: BaseException | None = None):
        self.attempts = list(attempts)
        self.last_error = last_error
        tried = ", ".join(a.model for a in self.attempts) or "none"
        super().__init__(f"All AI models failed (tried: {tried}); last error: {last_error}")


class UnparsableResponse(VocabError):
    """AI output could not be parsed as JSON. Keeps the raw text."""

    def __init__(self, raw: str, reason: str = ""):
        self.raw = raw
        self.reason = reason
        super().__init__(f"Failed to parse AI response: {reason or 'no JSON found'}")
