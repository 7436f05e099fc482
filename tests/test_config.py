"""Tests for configuration loading and saving."""
from __future__ import annotations

import json
from unittest.mock import patch

from vocalab.config import DEFAULTS, Settings, load_settings, save_settings


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.llm_provider == "gemini"
        assert s.ai_models[0] == "gemini-2.5-flash"
        assert s.quiz_count == 10
        assert s.use_ai_distractors is False

    def test_models_not_shared(self):
        a, b = Settings(), Settings()
        a.ai_models.append("extra")
        assert b.ai_models == DEFAULTS["ai_models"]

    def test_to_dict(self):
        d = Settings().to_dict()
        assert d["llm_provider"] == "gemini"
        assert isinstance(d["ai_models"], list)
        assert set(d) == set(DEFAULTS)

    def test_to_dict_roundtrip(self):
        s = Settings(llm_provider="ollama", ai_timeout=5.0)
        s2 = Settings(**s.to_dict())
        assert s2.llm_provider == "ollama"
        assert s2.ai_timeout == 5.0


class TestLoadSaveSettings:
    def test_load_from_file(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"llm_provider": "openai", "quiz_count": 20}))

        with patch("vocalab.config.CONFIG_PATH", config_path):
            s = load_settings()
        assert s.llm_provider == "openai"
        assert s.quiz_count == 20
        assert s.quiz_mode == "wordToMeaning"

    def test_load_missing_file(self, tmp_path):
        with patch("vocalab.config.CONFIG_PATH", tmp_path / "nonexistent.json"):
            s = load_settings()
        assert s.llm_provider == "gemini"

    def test_save_creates_file(self, tmp_path):
        config_path = tmp_path / "config.json"
        with patch("vocalab.config.CONFIG_PATH", config_path):
            save_settings(Settings(ai_models=["a", "b"]))

        data = json.loads(config_path.read_text())
        assert data["ai_models"] == ["a", "b"]

    def test_unknown_keys_ignored(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"llm_provider": "ollama", "unknown_key": "value"}))

        with patch("vocalab.config.CONFIG_PATH", config_path):
            s = load_settings()
        assert s.llm_provider == "ollama"
        assert not hasattr(s, "unknown_key")

    def test_single_model_migrated(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"llm_model": "qwen3:8b"}))

        with patch("vocalab.config.CONFIG_PATH", config_path):
            s = load_settings()
        assert s.ai_models == ["qwen3:8b"]
