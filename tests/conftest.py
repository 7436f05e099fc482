"""Shared test fixtures."""
from __future__ import annotations

import pytest

from vocalab.db import Database
from vocalab.models import WordEntry


@pytest.fixture
def tmp_db(tmp_path):
    """Create a fresh temporary database."""
    db = Database(tmp_path / "test.db")
    yield db
    db.close()


@pytest.fixture
def fruit_corpus():
    """Four words with meanings: the smallest corpus a quiz accepts."""
    return [
        WordEntry("w1", "apple", "苹果"),
        WordEntry("w2", "banana", "香蕉"),
        WordEntry("w3", "cherry", "櫻桃"),
        WordEntry("w4", "date", "蜜枣"),
    ]


@pytest.fixture
def adjective_corpus():
    """A larger corpus with parts of speech and examples."""
    rows = [
        ("pale", "蒼白的", "adj", "Her face turned pale."),
        ("brave", "勇敢的", "adj", "The brave firefighter ran inside."),
        ("eager", "渴望的", "adj", "He was eager to start."),
        ("fragile", "易碎的", "adj", "The vase is fragile."),
        ("humble", "謙虛的", "adj", "She stayed humble after winning."),
        ("keen", "敏銳的", "adj", "A keen eye for detail."),
        ("loyal", "忠誠的", "adj", "A loyal friend."),
        ("vivid", "生動的", "adj", "A vivid description."),
    ]
    return [
        WordEntry(f"a{i}", word, meaning, pos, example)
        for i, (word, meaning, pos, example) in enumerate(rows, 1)
    ]


@pytest.fixture
def populated_db(tmp_db):
    """A database with one list holding the four fruit words."""
    wl = tmp_db.create_word_list("Fruit", "Things that grow on trees", ["food"])
    for word, meaning in [
        ("apple", "苹果"), ("banana", "香蕉"), ("cherry", "櫻桃"), ("date", "蜜枣"),
    ]:
        tmp_db.add_word(wl["id"], word, meaning=meaning)
    return tmp_db


@pytest.fixture
def fruit_list_id(populated_db):
    return populated_db.get_word_lists()[0]["id"]
