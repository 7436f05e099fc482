"""Match AI-produced records back to canonical corpus entries."""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from vocalab.models import AIRecord, WordEntry
from vocalab.sampler import DISTRACTOR_COUNT, normalize_option

_log = logging.getLogger("vocalab.reconcile")

R = TypeVar("R")


@dataclass
class ReconciliationMiss:
    entry: WordEntry
    reason: str


@dataclass
class Reconciliation:
    resolved: dict[str, AIRecord] = field(default_factory=dict)  # entry id -> record
    unresolved: list[ReconciliationMiss] = field(default_factory=list)


def match_records(
    keys: Iterable[str],
    records: Iterable[R],
    key_of: Callable[[R], str],
) -> tuple[dict[str, R], list[str]]:
    """Case-insensitive exact match of *records* onto canonical *keys*.

    Returns ``(matched, unmatched)`` where *matched* maps each canonical key
    to its record.  For duplicate record keys the first one wins.  Canonical
    keys that fold to the same value are all left unmatched.
    """
    index: dict[str, str] = {}
    ambiguous: set[str] = set()
    ordered: list[str] = []
    for key in keys:
        folded = key.strip().casefold()
        ordered.append(key)
        if folded in index and index[folded] != key:
            ambiguous.add(folded)
        index.setdefault(folded, key)

    matched: dict[str, R] = {}
    for record in records:
        folded = (key_of(record) or "").strip().casefold()
        canonical = index.get(folded)
        if canonical is None:
            _log.info("AI returned unknown key %r, ignored", key_of(record))
            continue
        if folded in ambiguous:
            continue
        if canonical in matched:
            _log.debug("Duplicate AI record for %r, keeping the first", canonical)
            continue
        matched[canonical] = record

    seen: set[str] = set()
    unmatched = []
    for key in ordered:
        if key not in matched and key not in seen:
            unmatched.append(key)
            seen.add(key)
    return matched, unmatched


def clean_distractors(values: Iterable[str], answer: str, required: int = DISTRACTOR_COUNT) -> list[str]:
    """Non-empty, mutually distinct values other than *answer*, capped at *required*."""
    seen = {normalize_option(answer)}
    cleaned: list[str] = []
    for value in values:
        value = value.strip()
        key = normalize_option(value)
        if not value or key in seen:
            continue
        seen.add(key)
        cleaned.append(value)
        if len(cleaned) == required:
            break
    return cleaned


def reconcile(
    entries: Sequence[WordEntry],
    records: Iterable[AIRecord],
    answer_field: str = "meaning",
    required: int = DISTRACTOR_COUNT,
) -> Reconciliation:
    """Partition *entries* into resolved/unresolved against AI *records*.

    Resolved records carry exactly *required* cleaned distractors.  Never
    raises.
    """
    result = Reconciliation()
    by_text: dict[str, list[WordEntry]] = {}
    for entry in entries:
        by_text.setdefault(entry.text, []).append(entry)

    matched, _ = match_records(by_text.keys(), records, lambda r: r.key)

    for entry in entries:
        record = matched.get(entry.text)
        if record is None:
            reason = "ambiguous key" if _is_ambiguous(entry, entries) else "no matching record"
            result.unresolved.append(ReconciliationMiss(entry, reason))
            continue
        if len(by_text[entry.text]) > 1:
            result.unresolved.append(ReconciliationMiss(entry, "ambiguous key"))
            continue
        answer = getattr(entry, answer_field) or ""
        distractors = clean_distractors(record.distractors, answer, required)
        if len(distractors) < required:
            result.unresolved.append(ReconciliationMiss(
                entry, f"only {len(distractors)} usable distractors",
            ))
            continue
        result.resolved[entry.id] = AIRecord(
            key=entry.text,
            distractors=distractors,
            explanation=record.explanation,
        )

    for miss in result.unresolved:
        _log.info("Reconciliation miss for %r: %s", miss.entry.text, miss.reason)
    return result


def _is_ambiguous(entry: WordEntry, entries: Sequence[WordEntry]) -> bool:
    folded = entry.text.strip().casefold()
    return sum(1 for e in entries if e.text.strip().casefold() == folded) > 1
