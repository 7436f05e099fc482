"""Tests for parsing and canonicalizing LLM output."""
from __future__ import annotations

import pytest

from vocalab.errors import UnparsableResponse
from vocalab.normalizer import (
    canonical_field,
    parse_records,
    parse_response,
    strip_fences,
    to_ai_records,
    to_word_info,
)


class TestParseResponse:
    def test_fenced_equals_bare(self):
        fenced = '```json\n{"meaning":"x"}\n```'
        assert parse_response(fenced) == parse_response('{"meaning":"x"}')
        assert parse_response(fenced) == {"meaning": "x"}

    def test_fence_without_language(self):
        assert parse_response('```\n[1, 2]\n```') == [1, 2]

    def test_fence_markers_anywhere(self):
        text = 'Sure!\n```json\n[{"word": "pale"}]\n```\nDone.'
        assert parse_response(text) == [{"word": "pale"}]

    def test_think_block_removed(self):
        text = '<think>maybe {"word": "draft"}</think>\n{"word": "final"}'
        assert parse_response(text) == {"word": "final"}

    def test_surrounding_chatter(self):
        text = 'Here is the result:\n\n{"stem": "test", "value": 42}\n\nHope that helps!'
        assert parse_response(text)["value"] == 42

    def test_prefers_last_block(self):
        text = 'Draft: {"v": 1}\nFinal: {"v": 2}'
        assert parse_response(text) == {"v": 2}

    def test_braces_inside_strings(self):
        text = 'Result: {"example": "use {curly} braces", "n": 1}'
        assert parse_response(text)["example"] == "use {curly} braces"

    def test_not_json(self):
        with pytest.raises(UnparsableResponse) as exc_info:
            parse_response("This is not JSON at all.")
        assert exc_info.value.raw == "This is not JSON at all."

    def test_malformed_json(self):
        raw = '{"stem": "missing closing brace"'
        with pytest.raises(UnparsableResponse) as exc_info:
            parse_response(raw)
        assert exc_info.value.raw == raw

    def test_unclosed_opener_before_answer(self):
        text = 'Note: { this never closes. Answer: [1, 2]'
        assert parse_response(text) == [1, 2]

    def test_long_unbalanced_prefix(self):
        text = "[" * 200 + ' {"word": "pale"}'
        assert parse_response(text) == {"word": "pale"}

    def test_only_unbalanced_openers(self):
        with pytest.raises(UnparsableResponse):
            parse_response("[{" * 10000)

    def test_strip_fences_trims(self):
        assert strip_fences("  ```json\n{}\n```  ") == "{}"


class TestCanonicalField:
    def test_exact_name_first(self):
        assert canonical_field({"meaning": "a", "Meaning": "b"}, "meaning") == "a"

    def test_capitalized_variant(self):
        assert canonical_field({"Meaning": "b"}, "meaning") == "b"

    def test_synonym(self):
        assert canonical_field({"Definition": "c"}, "meaning") == "c"

    def test_empty_value_skipped(self):
        assert canonical_field({"meaning": "", "definition": "d"}, "meaning") == "d"

    def test_missing_is_none(self):
        assert canonical_field({"word": "pale"}, "example") is None

    def test_part_of_speech_variants(self):
        assert canonical_field({"part_of_speech": "adj"}, "part_of_speech") == "adj"
        assert canonical_field({"PartOfSpeech": "noun"}, "part_of_speech") == "noun"


class TestParseRecords:
    def test_bare_array(self):
        assert parse_records('[{"word": "a"}, {"word": "b"}]') == [{"word": "a"}, {"word": "b"}]

    def test_wrapped_array(self):
        assert parse_records('{"words": [{"word": "a"}]}') == [{"word": "a"}]

    def test_single_object(self):
        assert parse_records('{"word": "a"}') == [{"word": "a"}]

    def test_non_objects_dropped(self):
        assert parse_records('[{"word": "a"}, "junk", 3]') == [{"word": "a"}]

    def test_scalar_is_unparsable(self):
        with pytest.raises(UnparsableResponse):
            parse_records("42")


class TestRecords:
    def test_ai_records(self):
        items = [
            {"Word": "pale", "Distractors": ["勇敢的", "渴望的", "易碎的"]},
            {"word": "brave", "wrong_answers": ["a", "b"], "explanation": "why"},
            {"meaning": "no key"},
        ]
        records = to_ai_records(items)
        assert [r.key for r in records] == ["pale", "brave"]
        assert records[0].distractors == ["勇敢的", "渴望的", "易碎的"]
        assert records[1].explanation == "why"

    def test_non_list_distractors(self):
        records = to_ai_records([{"word": "pale", "distractors": {"a": 1}}])
        assert records[0].distractors == []

    def test_word_info_partial(self):
        info = to_word_info({"Word": "pale", "Definition": "蒼白的"})
        assert info.word == "pale"
        assert info.meaning == "蒼白的"
        assert info.part_of_speech == ""
        assert info.example == ""

    def test_word_info_fallback_word(self):
        info = to_word_info({"meaning": "x"}, fallback_word="pale")
        assert info.word == "pale"
