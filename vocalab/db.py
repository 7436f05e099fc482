from __future__ import annotations

import json
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path

from vocalab.models import QuizQuestion, WordEntry

SCHEMA = """
CREATE TABLE IF NOT EXISTS word_lists (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    tags TEXT DEFAULT '[]',
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS words (
    id TEXT PRIMARY KEY,
    word_list_id TEXT NOT NULL REFERENCES word_lists(id),
    word TEXT NOT NULL,
    meaning TEXT,
    part_of_speech TEXT,
    example TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS questions (
    id TEXT PRIMARY KEY,
    word_list_id TEXT NOT NULL REFERENCES word_lists(id),
    word_id TEXT,
    type TEXT NOT NULL DEFAULT 'multiple-choice',
    prompt TEXT NOT NULL,
    options_json TEXT NOT NULL,
    correct_answer TEXT NOT NULL,
    explanation TEXT,
    created_by_ai INTEGER DEFAULT 0,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_words_list ON words(word_list_id);
CREATE INDEX IF NOT EXISTS idx_questions_list ON questions(word_list_id);
"""

WORD_FIELDS = ("word", "meaning", "part_of_speech", "example")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


def _list_row(row: sqlite3.Row) -> dict:
    d = dict(row)
    d["tags"] = json.loads(d.get("tags") or "[]")
    return d


def _entry(row: sqlite3.Row) -> WordEntry:
    return WordEntry(
        id=row["id"],
        text=row["word"],
        meaning=row["meaning"] or "",
        part_of_speech=row["part_of_speech"],
        example=row["example"],
    )


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self._init_schema()

    def _init_schema(self) -> None:
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    # ── Word lists ────────────────────────────────────────────────────────

    def create_word_list(
        self, title: str, description: str | None = None, tags: list[str] | None = None,
    ) -> dict:
        list_id = _new_id()
        self.conn.execute(
            "INSERT INTO word_lists (id, title, description, tags, created_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (list_id, title, description, json.dumps(tags or []), _now()),
        )
        self.conn.commit()
        return self.get_word_list(list_id)

    def get_word_lists(self) -> list[dict]:
        """All lists, newest first, with word and question counts."""
        rows = self.conn.execute("""
            SELECT wl.*,
                (SELECT COUNT(*) FROM words w WHERE w.word_list_id = wl.id) AS word_count,
                (SELECT COUNT(*) FROM questions q WHERE q.word_list_id = wl.id) AS question_count
            FROM word_lists wl
            ORDER BY wl.created_at DESC
        """).fetchall()
        return [_list_row(r) for r in rows]

    def get_word_list(self, list_id: str) -> dict | None:
        row = self.conn.execute(
            "SELECT * FROM word_lists WHERE id = ?", (list_id,)
        ).fetchone()
        return _list_row(row) if row else None

    def update_word_list(
        self, list_id: str, title: str | None = None, description: str | None = None,
    ) -> dict | None:
        if title:
            self.conn.execute(
                "UPDATE word_lists SET title = ? WHERE id = ?", (title, list_id)
            )
        if description is not None:
            self.conn.execute(
                "UPDATE word_lists SET description = ? WHERE id = ?", (description, list_id)
            )
        self.conn.commit()
        return self.get_word_list(list_id)

    def delete_word_list(self, list_id: str) -> bool:
        """Delete a list together with its words and questions."""
        with self.conn:
            self.conn.execute("DELETE FROM questions WHERE word_list_id = ?", (list_id,))
            self.conn.execute("DELETE FROM words WHERE word_list_id = ?", (list_id,))
            cur = self.conn.execute("DELETE FROM word_lists WHERE id = ?", (list_id,))
        return cur.rowcount > 0

    # ── Words ─────────────────────────────────────────────────────────────

    def add_word(
        self,
        list_id: str,
        word: str,
        meaning: str | None = None,
        part_of_speech: str | None = None,
        example: str | None = None,
    ) -> dict:
        word_id = _new_id()
        self.conn.execute(
            "INSERT INTO words (id, word_list_id, word, meaning, part_of_speech, example, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (word_id, list_id, word, meaning, part_of_speech, example, _now()),
        )
        self.conn.commit()
        return self.get_word(word_id)

    def get_word(self, word_id: str) -> dict | None:
        row = self.conn.execute("SELECT * FROM words WHERE id = ?", (word_id,)).fetchone()
        return dict(row) if row else None

    def get_list_words(self, list_id: str) -> list[dict]:
        rows = self.conn.execute(
            "SELECT * FROM words WHERE word_list_id = ? ORDER BY created_at DESC",
            (list_id,),
        ).fetchall()
        return [dict(r) for r in rows]

    def update_word(self, word_id: str, **fields) -> dict | None:
        """Update the given columns (meaning, part_of_speech, example, word)."""
        updates = {k: v for k, v in fields.items() if k in WORD_FIELDS}
        if updates:
            assignments = ", ".join(f"{k} = ?" for k in updates)
            self.conn.execute(
                f"UPDATE words SET {assignments} WHERE id = ?",
                (*updates.values(), word_id),
            )
            self.conn.commit()
        return self.get_word(word_id)

    def delete_word(self, word_id: str) -> bool:
        cur = self.conn.execute("DELETE FROM words WHERE id = ?", (word_id,))
        self.conn.commit()
        return cur.rowcount > 0

    def get_word_count(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) FROM words").fetchone()
        return row[0]

    def fetch_corpus(self, list_id: str | None = None) -> list[WordEntry]:
        """Words that have a meaning, optionally restricted to one list."""
        sql = "SELECT * FROM words WHERE meaning IS NOT NULL AND TRIM(meaning) != ''"
        params: tuple = ()
        if list_id is not None:
            sql += " AND word_list_id = ?"
            params = (list_id,)
        rows = self.conn.execute(sql, params).fetchall()
        return [_entry(r) for r in rows]

    # ── Questions ─────────────────────────────────────────────────────────

    def save_questions(
        self, list_id: str, questions: list[QuizQuestion], created_by_ai: bool = False,
    ) -> int:
        """Persist *questions* for a list in one transaction. Returns the count."""
        now = _now()
        with self.conn:
            for q in questions:
                self.conn.execute(
                    "INSERT INTO questions "
                    "(id, word_list_id, word_id, type, prompt, options_json, correct_answer, "
                    "explanation, created_by_ai, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        _new_id(),
                        list_id,
                        q.id,
                        q.type,
                        q.prompt,
                        json.dumps(q.options, ensure_ascii=False),
                        q.correct_answer,
                        q.explanation,
                        1 if created_by_ai else 0,
                        now,
                    ),
                )
        return len(questions)

    def get_list_questions(self, list_id: str) -> list[dict]:
        rows = self.conn.execute(
            "SELECT * FROM questions WHERE word_list_id = ? ORDER BY created_at DESC, rowid DESC",
            (list_id,),
        ).fetchall()
        questions = []
        for r in rows:
            q = dict(r)
            q["options"] = json.loads(q.pop("options_json"))
            q["created_by_ai"] = bool(q["created_by_ai"])
            questions.append(q)
        return questions

    def get_question_count(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) FROM questions").fetchone()
        return row[0]

    # ── Stats ─────────────────────────────────────────────────────────────

    def get_stats(self) -> dict:
        lists = self.conn.execute("SELECT COUNT(*) FROM word_lists").fetchone()[0]
        with_meaning = self.conn.execute(
            "SELECT COUNT(*) FROM words WHERE meaning IS NOT NULL AND TRIM(meaning) != ''"
        ).fetchone()[0]
        return {
            "total_lists": lists,
            "total_words": self.get_word_count(),
            "words_with_meaning": with_meaning,
            "total_questions": self.get_question_count(),
        }
