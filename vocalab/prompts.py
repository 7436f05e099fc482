"""Prompt templates for AI distractor generation and word lookup."""
from __future__ import annotations

import json

from vocalab.models import WordEntry

DISTRACTOR_PROMPT = """\
Don't say a lot of polite words, go directly into the topic. You are writing \
wrong answers for a multiple-choice vocabulary quiz.

{direction}

Entries:
{entries}

For EACH entry, give exactly 3 distractors: plausible but clearly wrong \
{answer_kind}. Distractors must differ from the correct answer and from each \
other. {style_hint}

Return ONLY a valid JSON array of objects, one per entry:
[
  {{"word": "the English word exactly as given", "distractors": ["...", "...", "..."]}}
]
Ensure the "word" field exactly matches the input word so results can be \
matched back. Do not include markdown formatting.
"""

LIST_QUESTION_PROMPT = """\
Create a quiz for the following vocabulary words:
{entries}

Generate 1 multiple-choice question for EACH word. The question asks for the \
meaning of the word; the correct answer is the meaning given above.

Return ONLY a valid JSON array of objects, where each object has:
- "word": the English word exactly as given
- "distractors": 3 plausible but wrong meanings, written in the same language \
and style as the correct meaning
- "explanation": a brief explanation of why the correct meaning is right

The output must be valid JSON. Do not include markdown formatting.
"""

WORD_LOOKUP_PROMPT = """\
Provide the meaning, part of speech, and a simple example sentence for the \
English word "{word}".
Return ONLY a JSON object with the following keys:
- meaning: a definition in Traditional Chinese (繁體中文).
- partOfSpeech: The part of speech (e.g., noun, verb, adj) in English or Chinese.
- example: A simple English example sentence containing the word.

Do not include markdown formatting like ```json. Just the raw JSON string.
"""

BATCH_LOOKUP_PROMPT = """\
Don't say a lot of polite words, go directly into the topic. For each of the \
following English words, provide the meaning, part of speech, and a simple \
example sentence:
{words}

Return ONLY a VALID JSON array of objects.
Each object MUST follow this structure:
{{
  "word": "The original English word from the list",
  "meaning": "A detailed definition in Traditional Chinese (繁體中文).",
  "partOfSpeech": "The part of speech (e.g., noun, verb, adj) in English or Chinese.",
  "example": "A simple English example sentence containing the word."
}}

For example, if the list contains "pale", one object in the array should be:
{{"word": "pale", "meaning": "缺乏鮮明的顏色；顏色很淺的；蒼白的", "partOfSpeech": "Adjective", "example": "Her face turned pale when she heard the bad news."}}

Ensure the "word" field exactly matches the input word to allow matching results back.
Do not include markdown formatting like ```json. Just the raw JSON string.
"""


def format_entries(entries: list[WordEntry]) -> str:
    return "\n".join(f"- {e.text}: {e.meaning}" for e in entries)


def distractor_prompt(entries: list[WordEntry], answer_field: str) -> str:
    if answer_field == "meaning":
        direction = "The student sees the English word and must pick its meaning."
        answer_kind = "meanings"
        style_hint = "Write them in the same language and style as the given meaning."
    else:
        direction = "The student sees the meaning and must pick the English word."
        answer_kind = "English words"
        style_hint = "Use real English words of the same part of speech."
    return DISTRACTOR_PROMPT.format(
        direction=direction,
        entries=format_entries(entries),
        answer_kind=answer_kind,
        style_hint=style_hint,
    )


def list_question_prompt(entries: list[WordEntry]) -> str:
    return LIST_QUESTION_PROMPT.format(entries=format_entries(entries))


def word_lookup_prompt(word: str) -> str:
    return WORD_LOOKUP_PROMPT.format(word=word)


def batch_lookup_prompt(words: list[str]) -> str:
    return BATCH_LOOKUP_PROMPT.format(words=json.dumps(words, ensure_ascii=False))
