"""Tests for the database layer."""
from __future__ import annotations

from vocalab.models import QuizQuestion


class TestWordLists:
    def test_create_and_get(self, tmp_db):
        wl = tmp_db.create_word_list("Animals", "Zoo words", ["nature", "kids"])
        assert wl["title"] == "Animals"
        assert wl["tags"] == ["nature", "kids"]
        assert tmp_db.get_word_list(wl["id"])["description"] == "Zoo words"

    def test_get_missing(self, tmp_db):
        assert tmp_db.get_word_list("nope") is None

    def test_list_counts(self, populated_db, fruit_list_id):
        lists = populated_db.get_word_lists()
        assert len(lists) == 1
        assert lists[0]["word_count"] == 4
        assert lists[0]["question_count"] == 0

    def test_update(self, populated_db, fruit_list_id):
        wl = populated_db.update_word_list(fruit_list_id, title="Fruits", description="")
        assert wl["title"] == "Fruits"
        assert wl["description"] == ""

    def test_update_keeps_title_when_blank(self, populated_db, fruit_list_id):
        wl = populated_db.update_word_list(fruit_list_id, title="", description=None)
        assert wl["title"] == "Fruit"
        assert wl["description"] == "Things that grow on trees"

    def test_delete_cascades(self, populated_db, fruit_list_id):
        q = QuizQuestion("x", "apple", "苹果", ["苹果", "香蕉", "櫻桃", "蜜枣"])
        populated_db.save_questions(fruit_list_id, [q])
        assert populated_db.delete_word_list(fruit_list_id) is True
        assert populated_db.get_word_count() == 0
        assert populated_db.get_question_count() == 0
        assert populated_db.delete_word_list(fruit_list_id) is False


class TestWords:
    def test_add_and_get(self, tmp_db):
        wl = tmp_db.create_word_list("L")
        w = tmp_db.add_word(wl["id"], "pale", "蒼白的", "adj", "She looked pale.")
        assert w["word"] == "pale"
        assert w["part_of_speech"] == "adj"
        assert tmp_db.get_word(w["id"])["example"] == "She looked pale."

    def test_update_only_known_fields(self, tmp_db):
        wl = tmp_db.create_word_list("L")
        w = tmp_db.add_word(wl["id"], "pale")
        updated = tmp_db.update_word(w["id"], meaning="蒼白的", bogus="x")
        assert updated["meaning"] == "蒼白的"
        assert "bogus" not in updated

    def test_delete(self, populated_db, fruit_list_id):
        word = populated_db.get_list_words(fruit_list_id)[0]
        assert populated_db.delete_word(word["id"]) is True
        assert populated_db.get_word(word["id"]) is None
        assert populated_db.delete_word(word["id"]) is False


class TestCorpus:
    def test_only_words_with_meaning(self, populated_db, fruit_list_id):
        populated_db.add_word(fruit_list_id, "fig")
        populated_db.add_word(fruit_list_id, "kiwi", meaning="   ")
        corpus = populated_db.fetch_corpus()
        assert sorted(e.text for e in corpus) == ["apple", "banana", "cherry", "date"]

    def test_restricted_to_list(self, populated_db, fruit_list_id):
        other = populated_db.create_word_list("Other")
        populated_db.add_word(other["id"], "pale", "蒼白的")
        assert len(populated_db.fetch_corpus()) == 5
        assert len(populated_db.fetch_corpus(fruit_list_id)) == 4
        assert [e.text for e in populated_db.fetch_corpus(other["id"])] == ["pale"]

    def test_entry_fields(self, tmp_db):
        wl = tmp_db.create_word_list("L")
        w = tmp_db.add_word(wl["id"], "pale", "蒼白的", "adj", "Pale skin.")
        entry = tmp_db.fetch_corpus()[0]
        assert entry.id == w["id"]
        assert entry.meaning == "蒼白的"
        assert entry.part_of_speech == "adj"


class TestQuestions:
    def test_save_and_load(self, populated_db, fruit_list_id):
        questions = [
            QuizQuestion("w1", "apple", "苹果", ["香蕉", "苹果", "櫻桃", "蜜枣"], explanation="fruit"),
            QuizQuestion("w2", "banana", "香蕉", ["香蕉", "苹果", "櫻桃", "蜜枣"]),
        ]
        assert populated_db.save_questions(fruit_list_id, questions, created_by_ai=True) == 2

        stored = populated_db.get_list_questions(fruit_list_id)
        assert len(stored) == 2
        apple = next(q for q in stored if q["prompt"] == "apple")
        assert apple["options"] == ["香蕉", "苹果", "櫻桃", "蜜枣"]
        assert apple["correct_answer"] == "苹果"
        assert apple["word_id"] == "w1"
        assert apple["created_by_ai"] is True
        assert apple["explanation"] == "fruit"

    def test_saving_twice_keeps_both(self, populated_db, fruit_list_id):
        q = QuizQuestion("w1", "apple", "苹果", ["苹果", "香蕉", "櫻桃", "蜜枣"])
        populated_db.save_questions(fruit_list_id, [q])
        populated_db.save_questions(fruit_list_id, [q])
        assert len(populated_db.get_list_questions(fruit_list_id)) == 2


class TestStats:
    def test_stats(self, populated_db, fruit_list_id):
        populated_db.add_word(fruit_list_id, "fig")
        stats = populated_db.get_stats()
        assert stats == {
            "total_lists": 1,
            "total_words": 5,
            "words_with_meaning": 4,
            "total_questions": 0,
        }
