"""Random distractor sampling from the corpus."""
from __future__ import annotations

import random
from collections.abc import Iterable, Sequence

from vocalab.models import WordEntry

DISTRACTOR_COUNT = 3


def normalize_option(value: str) -> str:
    """Comparison key for option uniqueness."""
    return value.strip().casefold()


def sample_distractors(
    target: WordEntry,
    corpus: Sequence[WordEntry],
    field: str = "meaning",
    k: int = DISTRACTOR_COUNT,
    rng: random.Random | None = None,
    exclude: Iterable[str] = (),
) -> list[str]:
    """Pick up to *k* distinct values of *field* from entries other than *target*.

    Values equal to the target's own value (or to anything in *exclude*) are
    skipped, as are duplicates.  When fewer than *k* candidates remain, all
    of them are returned.
    """
    rng = rng or random
    own = getattr(target, field) or ""
    excluded = {normalize_option(own)} | {normalize_option(v) for v in exclude}

    pool: list[str] = []
    for entry in corpus:
        if entry.id == target.id:
            continue
        value = (getattr(entry, field) or "").strip()
        if not value:
            continue
        key = normalize_option(value)
        if key in excluded:
            continue
        excluded.add(key)
        pool.append(value)

    if len(pool) <= k:
        rng.shuffle(pool)
        return pool
    return rng.sample(pool, k)
