"""Tests for settings and logging setup."""

import logging

from medicrew.config import DEFAULT_CORS_ORIGINS, DEFAULT_MODEL, Settings
from medicrew.utils.logging import get_logger, setup_logging


class TestSettings:
    def test_defaults(self, monkeypatch):
        for var in (
            "OPENROUTER_API_KEY",
            "MEDICREW_MODEL",
            "MEDICREW_TEMPERATURE",
            "CORS_ORIGINS",
            "LOG_LEVEL",
        ):
            monkeypatch.delenv(var, raising=False)

        settings = Settings.from_env()

        assert settings.api_key is None
        assert settings.model == DEFAULT_MODEL
        assert settings.temperature == 0.3
        assert settings.cors_origins == DEFAULT_CORS_ORIGINS
        assert settings.log_level == "INFO"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test")
        monkeypatch.setenv("MEDICREW_MODEL", "openai/gpt-4o-mini")
        monkeypatch.setenv("MEDICREW_TEMPERATURE", "0.7")
        monkeypatch.setenv("MEDICREW_MAX_TOKENS", "1024")
        monkeypatch.setenv("CORS_ORIGINS", "https://app.example.com, https://admin.example.com")

        settings = Settings.from_env()

        assert settings.api_key == "sk-test"
        assert settings.model == "openai/gpt-4o-mini"
        assert settings.temperature == 0.7
        assert settings.max_tokens == 1024
        assert settings.cors_origins == ["https://app.example.com", "https://admin.example.com"]

    def test_blank_api_key_is_unset(self, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "")
        assert Settings.from_env().api_key is None


class TestLogging:
    def test_setup_logging_configures_both_packages(self, tmp_path, monkeypatch):
        monkeypatch.delenv("LOG_FILE", raising=False)
        log_file = tmp_path / "logs" / "medicrew.log"

        logger = setup_logging("DEBUG", log_file=str(log_file))

        assert logger.name == "medicrew"
        assert logger.level == logging.DEBUG
        assert logging.getLogger("api").level == logging.DEBUG
        assert len(logger.handlers) == 2

        get_logger("workflow").info("hello from the workflow")
        for handler in logger.handlers:
            handler.flush()
        assert "hello from the workflow" in log_file.read_text()

        setup_logging("INFO")
        assert len(logger.handlers) == 1

    def test_get_logger_names(self):
        assert get_logger().name == "medicrew"
        assert get_logger("portal").name == "medicrew.portal"
