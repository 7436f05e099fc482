from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class WordEntry:
    id: str
    text: str
    meaning: str
    part_of_speech: str | None = None
    example: str | None = None


@dataclass
class QuizQuestion:
    id: str
    prompt: str
    correct_answer: str
    options: list[str]
    type: str = "multiple-choice"
    explanation: str = ""

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "type": self.type,
            "prompt": self.prompt,
            "correctAnswer": self.correct_answer,
            "options": list(self.options),
        }
        if self.explanation:
            data["explanation"] = self.explanation
        return data


@dataclass
class AIRecord:
    key: str
    distractors: list[str] = field(default_factory=list)
    explanation: str = ""


@dataclass
class WordInfo:
    word: str
    meaning: str = ""
    part_of_speech: str = ""
    example: str = ""

    def to_dict(self) -> dict:
        return {
            "word": self.word,
            "meaning": self.meaning,
            "partOfSpeech": self.part_of_speech,
            "example": self.example,
        }
