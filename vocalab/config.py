from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

LLM_PROVIDERS = ("gemini", "ollama", "anthropic", "openai")

DEFAULTS = {
    "llm_provider": "gemini",
    "ai_models": [
        "gemini-2.5-flash",
        "gemini-1.5-flash",
        "gemini-1.5-flash-001",
        "gemini-pro",
    ],
    "ai_timeout": 30.0,
    "ai_temperature": 0.7,
    "ollama_url": "http://localhost:11434",
    "gemini_url": "https://generativelanguage.googleapis.com",
    "db_path": "vocalab.db",
    "quiz_count": 10,
    "quiz_mode": "wordToMeaning",
    "use_ai_distractors": False,
}


@dataclass
class Settings:
    llm_provider: str = DEFAULTS["llm_provider"]
    ai_models: list[str] = field(default_factory=lambda: list(DEFAULTS["ai_models"]))
    ai_timeout: float = DEFAULTS["ai_timeout"]
    ai_temperature: float = DEFAULTS["ai_temperature"]
    ollama_url: str = DEFAULTS["ollama_url"]
    gemini_url: str = DEFAULTS["gemini_url"]
    db_path: str = DEFAULTS["db_path"]
    quiz_count: int = DEFAULTS["quiz_count"]
    quiz_mode: str = DEFAULTS["quiz_mode"]
    use_ai_distractors: bool = DEFAULTS["use_ai_distractors"]

    @property
    def project_root(self) -> Path:
        return Path(__file__).resolve().parent.parent

    @property
    def db_full_path(self) -> Path:
        return self.project_root / self.db_path

    def to_dict(self) -> dict:
        return {
            "llm_provider": self.llm_provider,
            "ai_models": self.ai_models,
            "ai_timeout": self.ai_timeout,
            "ai_temperature": self.ai_temperature,
            "ollama_url": self.ollama_url,
            "gemini_url": self.gemini_url,
            "db_path": self.db_path,
            "quiz_count": self.quiz_count,
            "quiz_mode": self.quiz_mode,
            "use_ai_distractors": self.use_ai_distractors,
        }


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        # Migrate: single llm_model -> ai_models fallback list
        if "llm_model" in raw:
            raw.setdefault("ai_models", [raw["llm_model"]])
            del raw["llm_model"]
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4, ensure_ascii=False) + "\n")
