"""AI dictionary lookup: meaning, part of speech and example for words."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from vocalab.errors import UnparsableResponse
from vocalab.models import WordInfo
from vocalab.normalizer import canonical_field, parse_records, parse_response, to_word_info
from vocalab.prompts import batch_lookup_prompt, word_lookup_prompt
from vocalab.reconcile import match_records

if TYPE_CHECKING:
    from vocalab.ai_client import AIGenerationClient

_log = logging.getLogger("vocalab.lookup")


@dataclass
class BatchLookup:
    found: list[WordInfo] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


async def lookup_words(client: AIGenerationClient, words: Sequence[str]) -> BatchLookup:
    """Look up several words with one AI call.

    Results are matched back to *words* case-insensitively and returned in
    request order with the caller's spelling.  Provider exhaustion and
    unparsable output propagate.
    """
    requested = []
    seen: set[str] = set()
    for w in words:
        w = w.strip()
        if w and w.casefold() not in seen:
            seen.add(w.casefold())
            requested.append(w)
    if not requested:
        return BatchLookup()

    _log.info("Batch lookup: %d words", len(requested))
    raw = await client.generate(batch_lookup_prompt(requested), temperature=0.3)
    items = parse_records(raw)

    matched, missing = match_records(
        requested, items, lambda item: str(canonical_field(item, "word") or ""),
    )
    result = BatchLookup(missing=missing)
    for word in requested:
        item = matched.get(word)
        if item is not None:
            info = to_word_info(item)
            info.word = word
            result.found.append(info)
    if missing:
        _log.info("Batch lookup: no result for %s", ", ".join(missing))
    return result


async def lookup_word(client: AIGenerationClient, word: str) -> WordInfo:
    """Single-word lookup. Errors propagate to the caller."""
    word = word.strip()
    if not word:
        raise ValueError("Word is required")
    raw = await client.generate(word_lookup_prompt(word), temperature=0.3)
    data = parse_response(raw)
    if isinstance(data, list):
        data = next((d for d in data if isinstance(d, dict)), None)
    if not isinstance(data, dict):
        raise UnparsableResponse(raw, "expected a JSON object")
    info = to_word_info(data, fallback_word=word)
    info.word = word
    return info
