"""Turn free-form LLM text into canonical records."""
from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from vocalab.errors import UnparsableResponse
from vocalab.models import AIRecord, WordInfo

_log = logging.getLogger("vocalab.normalizer")

FENCE_MARKERS = ("```json", "```JSON", "```")

_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)

# Checked in order; the first present, non-empty value wins.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "word": ("word", "Word", "term", "Term", "key"),
    "meaning": ("meaning", "Meaning", "definition", "Definition", "translation"),
    "part_of_speech": ("partOfSpeech", "PartOfSpeech", "part_of_speech", "pos", "POS"),
    "example": ("example", "Example", "sentence", "Sentence", "exampleSentence"),
    "distractors": (
        "distractors", "Distractors", "wrongOptions", "wrong_options",
        "wrongAnswers", "wrong_answers", "options",
    ),
    "explanation": ("explanation", "Explanation", "reason", "why"),
}

# Keys an LLM likes to wrap a record list in.
_LIST_WRAPPERS = ("words", "items", "results", "questions", "data")


def strip_fences(raw: str) -> str:
    """Remove reasoning blocks and code fence markers, then trim."""
    text = _THINK_RE.sub("", raw)
    for marker in FENCE_MARKERS:
        text = text.replace(marker, "")
    return text.strip()


def parse_response(raw: str) -> Any:
    """Parse *raw* LLM output as JSON.

    Tries the whole de-fenced text first, then each balanced top-level
    ``{…}``/``[…]`` block, last-first (models tend to draft before the
    final answer).  Raises :class:`UnparsableResponse` when nothing parses.
    """
    text = strip_fences(raw)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        reason = str(e)

    for candidate in reversed(_find_json_blocks(text)):
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue

    _log.debug("Unparsable response: %.300s", raw)
    raise UnparsableResponse(raw, reason)


def _find_json_blocks(text: str) -> list[str]:
    """Find balanced top-level ``{…}`` and ``[…]`` substrings in *text*."""
    closers = {"{": "}", "[": "]"}
    results: list[str] = []
    # Opener kinds that once ran off the end of the text are not retried.
    dead: set[str] = set()
    i = 0
    while i < len(text):
        opener = text[i]
        if opener not in closers or opener in dead:
            i += 1
            continue
        closer = closers[opener]
        depth = 0
        in_str = False
        escape = False
        for j in range(i, len(text)):
            ch = text[j]
            if escape:
                escape = False
                continue
            if ch == "\\":
                escape = True
                continue
            if ch == '"':
                in_str = not in_str
                continue
            if in_str:
                continue
            if ch == opener:
                depth += 1
            elif ch == closer:
                depth -= 1
                if depth == 0:
                    results.append(text[i : j + 1])
                    i = j + 1
                    break
        else:
            dead.add(opener)
            i += 1
    return results


def canonical_field(item: Mapping, field: str) -> Any:
    for alias in FIELD_ALIASES[field]:
        value = item.get(alias)
        if value is not None and value != "":
            return value
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        return []
    return [_as_text(v) for v in value if isinstance(v, (str, int, float))]


def parse_records(raw: str) -> list[dict]:
    """Parse *raw* into a list of JSON objects.

    Accepts a bare array, an array wrapped in a single object key, or a
    lone object.  Non-object elements are dropped.
    """
    data = parse_response(raw)
    if isinstance(data, dict):
        for key in _LIST_WRAPPERS:
            if isinstance(data.get(key), list):
                data = data[key]
                break
        else:
            data = [data]
    if not isinstance(data, list):
        raise UnparsableResponse(raw, f"expected a JSON array, got {type(data).__name__}")
    records = [item for item in data if isinstance(item, dict)]
    if len(records) != len(data):
        _log.info("Dropped %d non-object items from AI response", len(data) - len(records))
    return records


def to_ai_records(items: Iterable[Mapping]) -> list[AIRecord]:
    """Canonicalize distractor records; records without a key are skipped."""
    records = []
    for item in items:
        key = _as_text(canonical_field(item, "word"))
        if not key:
            continue
        records.append(AIRecord(
            key=key,
            distractors=_as_string_list(canonical_field(item, "distractors")),
            explanation=_as_text(canonical_field(item, "explanation")),
        ))
    return records


def to_word_info(item: Mapping, fallback_word: str = "") -> WordInfo:
    return WordInfo(
        word=_as_text(canonical_field(item, "word")) or fallback_word,
        meaning=_as_text(canonical_field(item, "meaning")),
        part_of_speech=_as_text(canonical_field(item, "part_of_speech")),
        example=_as_text(canonical_field(item, "example")),
    )
