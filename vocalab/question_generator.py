"""Assemble multiple-choice quiz questions from the word corpus.

Distractors come from the AI first (one batched call for all targets) and
fall back to random sampling per entry whenever the AI output is missing,
malformed or cannot be matched back to a word.
"""
from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from typing import TYPE_CHECKING

from vocalab.errors import AIProviderExhaustedError, InsufficientDataError, UnparsableResponse
from vocalab.models import AIRecord, QuizQuestion, WordEntry
from vocalab.normalizer import parse_records, to_ai_records
from vocalab.prompts import distractor_prompt, list_question_prompt
from vocalab.reconcile import reconcile
from vocalab.sampler import normalize_option, sample_distractors

if TYPE_CHECKING:
    from vocalab.ai_client import AIGenerationClient
    from vocalab.db import Database

_log = logging.getLogger("vocalab.quiz")

MIN_CORPUS_SIZE = 4
OPTION_COUNT = 4

WORD_TO_MEANING = "wordToMeaning"
MEANING_TO_WORD = "meaningToWord"

MODE_ALIASES = {
    WORD_TO_MEANING: WORD_TO_MEANING,
    MEANING_TO_WORD: MEANING_TO_WORD,
    "en-zh": WORD_TO_MEANING,
    "zh-en": MEANING_TO_WORD,
}

# mode -> (prompt field, answer field)
DIRECTIONS = {
    WORD_TO_MEANING: ("text", "meaning"),
    MEANING_TO_WORD: ("meaning", "text"),
}


def resolve_mode(mode: str) -> str:
    try:
        return MODE_ALIASES[mode]
    except KeyError:
        raise ValueError(
            f"Unknown quiz mode: {mode!r} (expected {WORD_TO_MEANING} or {MEANING_TO_WORD})"
        ) from None


def _usable(corpus: Sequence[WordEntry]) -> list[WordEntry]:
    return [e for e in corpus if e.text.strip() and e.meaning and e.meaning.strip()]


def select_targets(
    corpus: Sequence[WordEntry], count: int, rng: random.Random | None = None,
) -> list[WordEntry]:
    """Uniform selection of ``min(count, len(corpus))`` entries without replacement."""
    rng = rng or random
    return rng.sample(list(corpus), max(0, min(count, len(corpus))))


def build_options(
    target: WordEntry,
    distractors: Sequence[str],
    corpus: Sequence[WordEntry],
    answer_field: str,
    rng: random.Random | None = None,
) -> list[str]:
    """Correct answer plus distractors, padded to four and shuffled."""
    rng = rng or random
    answer = getattr(target, answer_field)
    options = [answer]
    seen = {normalize_option(answer)}
    for d in distractors:
        key = normalize_option(d)
        if not d.strip() or key in seen:
            continue
        seen.add(key)
        options.append(d.strip())
        if len(options) == OPTION_COUNT:
            break

    if len(options) < OPTION_COUNT:
        options += sample_distractors(
            target, corpus, field=answer_field,
            k=OPTION_COUNT - len(options), rng=rng, exclude=options,
        )
        if len(options) < OPTION_COUNT:
            _log.warning(
                "Only %d distinct options available for %r", len(options), target.text,
            )

    rng.shuffle(options)
    return options


def assemble_questions(
    targets: Sequence[WordEntry],
    corpus: Sequence[WordEntry],
    mode: str,
    ai_records: dict[str, AIRecord] | None = None,
    rng: random.Random | None = None,
) -> list[QuizQuestion]:
    """One question per target; entries without an AI record use random distractors."""
    prompt_field, answer_field = DIRECTIONS[mode]
    ai_records = ai_records or {}
    questions = []
    for target in targets:
        record = ai_records.get(target.id)
        if record is not None:
            distractors = record.distractors
            explanation = record.explanation
        else:
            distractors = sample_distractors(target, corpus, field=answer_field, rng=rng)
            explanation = ""
        questions.append(QuizQuestion(
            id=target.id,
            prompt=getattr(target, prompt_field),
            correct_answer=getattr(target, answer_field),
            options=build_options(target, distractors, corpus, answer_field, rng),
            explanation=explanation,
        ))
    return questions


async def _ai_distractors(
    client: AIGenerationClient,
    targets: list[WordEntry],
    answer_field: str,
) -> dict[str, AIRecord]:
    """Best-effort batched AI distractors, keyed by entry id. Never raises."""
    prompt = distractor_prompt(targets, answer_field)
    try:
        raw = await client.generate(prompt)
        records = to_ai_records(parse_records(raw))
    except AIProviderExhaustedError as e:
        _log.warning("AI distractors unavailable, using random ones: %s", e)
        return {}
    except UnparsableResponse as e:
        _log.warning("AI distractors unparsable, using random ones: %s", e.reason)
        _log.debug("Raw response: %.300s", e.raw)
        return {}

    result = reconcile(targets, records, answer_field=answer_field)
    _log.info(
        "AI distractors: %d resolved, %d falling back to random",
        len(result.resolved), len(result.unresolved),
    )
    return result.resolved


async def generate_quiz(
    db: Database,
    mode: str = WORD_TO_MEANING,
    count: int = 10,
    use_ai: bool = False,
    client: AIGenerationClient | None = None,
    rng: random.Random | None = None,
    list_id: str | None = None,
) -> list[QuizQuestion]:
    """Generate an ephemeral quiz over the whole corpus (or one list).

    Raises :class:`InsufficientDataError` when fewer than four words have a
    meaning.  AI problems never fail the quiz; affected entries get random
    distractors instead.
    """
    mode = resolve_mode(mode)
    corpus = _usable(db.fetch_corpus(list_id))
    if len(corpus) < MIN_CORPUS_SIZE:
        raise InsufficientDataError(len(corpus), MIN_CORPUS_SIZE)

    targets = select_targets(corpus, count, rng)
    _log.info("Quiz: %d questions (%s) from %d words", len(targets), mode, len(corpus))

    ai_records: dict[str, AIRecord] = {}
    if use_ai and targets:
        if client is None:
            _log.warning("AI distractors requested but no AI client configured")
        else:
            _, answer_field = DIRECTIONS[mode]
            ai_records = await _ai_distractors(client, targets, answer_field)

    return assemble_questions(targets, corpus, mode, ai_records, rng)


async def generate_list_questions(
    db: Database,
    list_id: str,
    client: AIGenerationClient,
    words: Sequence[WordEntry] | None = None,
    rng: random.Random | None = None,
) -> list[QuizQuestion]:
    """Generate and persist one AI question per word in a list.

    Unlike :func:`generate_quiz` there is no list-level fallback: if the AI
    is unreachable or its output unparsable the error propagates.  Words the
    AI skipped or botched still get random distractors.  Distractors are
    sampled from the list first, then from the whole corpus.
    """
    if words is None:
        words = db.fetch_corpus(list_id)
    words = _usable(words)
    if not words:
        raise InsufficientDataError(0, 1)

    ids = {w.id for w in words}
    universe = words + [e for e in _usable(db.fetch_corpus()) if e.id not in ids]
    if len(universe) < MIN_CORPUS_SIZE:
        raise InsufficientDataError(len(universe), MIN_CORPUS_SIZE)

    raw = await client.generate(list_question_prompt(words))
    records = to_ai_records(parse_records(raw))
    result = reconcile(words, records, answer_field="meaning")
    _log.info(
        "List %s: %d AI questions, %d with random distractors",
        list_id, len(result.resolved), len(result.unresolved),
    )

    questions = assemble_questions(words, universe, WORD_TO_MEANING, result.resolved, rng)
    saved = db.save_questions(list_id, questions, created_by_ai=True)
    _log.info("List %s: saved %d questions", list_id, saved)
    return questions
