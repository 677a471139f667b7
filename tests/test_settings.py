"""Tests for config/settings.py"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from config.settings import Settings


class TestSettings:
    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        settings = Settings()
        assert settings.answer_strategy == "auto"
        assert settings.heuristic_fallback is False
        assert settings.port == 3001
        assert settings.chat_model == "claude-haiku-4-5"
        assert settings.completion_timeout == 30.0
        settings.validate()

    @patch.dict(
        os.environ,
        {"ANSWER_STRATEGY": "Heuristic", "HEURISTIC_FALLBACK": "1", "DB_PATH": "/tmp/x.db"},
        clear=True,
    )
    def test_reads_environment(self):
        settings = Settings()
        assert settings.answer_strategy == "heuristic"
        assert settings.heuristic_fallback is True
        assert settings.db_path == "/tmp/x.db"

    @patch.dict(os.environ, {"ANSWER_STRATEGY": "anthropic"}, clear=True)
    def test_anthropic_requires_key(self):
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            Settings().validate()

    @patch.dict(os.environ, {"ANSWER_STRATEGY": "oracle"}, clear=True)
    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="ANSWER_STRATEGY"):
            Settings().validate()

    @patch.dict(os.environ, {"ANSWER_STRATEGY": "anthropic"}, clear=True)
    def test_anthropic_accepts_stored_key(self):
        Settings().validate(stored_api_key="sk-user")

    @patch.dict(os.environ, {"ANSWER_STRATEGY": "anthropic"}, clear=True)
    def test_missing_key_message_mentions_set_key(self):
        with pytest.raises(ValueError, match="set-key anthropic"):
            Settings().validate(stored_api_key=None)
