"""Tests for configuration management."""

import logging

import pytest
from pydantic import ValidationError

from openai_mock.backend import server
from openai_mock.backend.server import load_settings
from openai_mock.core.config import (
    DEFAULT_API_KEY,
    DEFAULT_EMBEDDING_DIMENSIONS_BY_MODEL,
    MockConfig,
    Settings,
    get_settings,
)
from openai_mock.core.logging_config import configure_logging


def test_settings_defaults(monkeypatch):
    for name in ("HOST", "PORT", "API_KEY", "REQUEST_TIMEOUT_SECS", "LOG_LEVEL", "ENABLE_CORS"):
        monkeypatch.delenv(f"OPENAI_MOCK_{name}", raising=False)

    settings = Settings()
    assert settings.HOST == "0.0.0.0"
    assert settings.PORT == 13673
    assert settings.API_KEY == DEFAULT_API_KEY
    assert settings.REQUEST_TIMEOUT_SECS == 30
    assert settings.ENABLE_CORS is True
    assert settings.LOG_LEVEL == "INFO"
    assert settings.base_url == "http://localhost:13673"
    assert settings.bind_address == "0.0.0.0:13673"


def test_settings_read_prefixed_environment(monkeypatch):
    """Environment variables use the OPENAI_MOCK_ prefix."""
    monkeypatch.setenv("OPENAI_MOCK_PORT", "8080")
    monkeypatch.setenv("OPENAI_MOCK_API_KEY", "sk-from-env")
    monkeypatch.setenv("OPENAI_MOCK_ENABLE_CORS", "false")

    settings = get_settings()
    assert settings.PORT == 8080
    assert settings.API_KEY == "sk-from-env"
    assert settings.ENABLE_CORS is False
    assert get_settings() is settings


def test_api_key_must_start_with_sk():
    with pytest.raises(ValidationError) as exc_info:
        Settings(API_KEY="not-a-key")

    assert "should start with 'sk-'" in str(exc_info.value)


def test_api_key_cannot_be_empty():
    with pytest.raises(ValidationError) as exc_info:
        Settings(API_KEY="")

    assert "cannot be empty" in str(exc_info.value)


@pytest.mark.parametrize(
    "raw, expected",
    [("info", "INFO"), ("trace", "DEBUG"), ("warn", "WARNING"), ("Error", "ERROR")],
)
def test_log_level_normalization(raw, expected):
    settings = Settings(LOG_LEVEL=raw)
    assert settings.LOG_LEVEL == expected
    assert settings.log_level_value == getattr(logging, expected)


def test_invalid_log_level_rejected():
    with pytest.raises(ValidationError) as exc_info:
        Settings(LOG_LEVEL="verbose")

    assert "Invalid log level" in str(exc_info.value)


def test_port_range_validated():
    with pytest.raises(ValidationError):
        Settings(PORT=0)
    with pytest.raises(ValidationError):
        Settings(PORT=70000)


def test_cors_origins_parsing():
    settings = Settings(CORS_ORIGINS="http://localhost:3000, https://example.com,")
    assert settings.cors_origins == ["http://localhost:3000", "https://example.com"]


def test_masked_api_key_hides_secret():
    settings = Settings(API_KEY="sk-very-secret-value")
    assert settings.masked_api_key == "sk-very-se***"
    assert "secret-value" not in settings.masked_api_key


def test_to_mock_config_carries_api_key():
    config = Settings(API_KEY="sk-custom").to_mock_config()
    assert config.api_key == "sk-custom"
    assert config.default_embedding_dimensions == 1536


def test_mock_config_is_read_only():
    config = MockConfig(
        default_embedding_dimensions_by_model={"custom-embed": 64},
        chat_text_pool=["only reply"],
    )

    assert config.chat_text_pool == ("only reply",)
    with pytest.raises(TypeError):
        config.default_embedding_dimensions_by_model["custom-embed"] = 128
    with pytest.raises(AttributeError):
        config.api_key = "sk-other"


def test_mock_config_default_dimension_table():
    assert DEFAULT_EMBEDDING_DIMENSIONS_BY_MODEL["text-embedding-ada-002"] == 1536
    assert DEFAULT_EMBEDDING_DIMENSIONS_BY_MODEL["text-embedding-3-large"] == 3072


def test_mock_config_rejects_empty_pool():
    with pytest.raises(ValueError):
        MockConfig(completion_text_pool=())


def test_command_line_overrides_environment(monkeypatch):
    monkeypatch.setenv("OPENAI_MOCK_PORT", "8080")
    monkeypatch.setenv("OPENAI_MOCK_HOST", "127.0.0.1")

    settings = load_settings(
        ["--port", "9000", "--enable-cors", "false", "--log-level", "debug", "--api-key", "sk-cli"]
    )

    assert settings.PORT == 9000
    assert settings.HOST == "127.0.0.1"
    assert settings.ENABLE_CORS is False
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.API_KEY == "sk-cli"


def test_command_line_rejects_bad_flag_value():
    with pytest.raises(SystemExit):
        load_settings(["--enable-logging", "maybe"])


def test_command_line_values_are_validated():
    with pytest.raises(ValidationError):
        load_settings(["--api-key", "invalid"])


def test_configure_logging_uses_normalized_level(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging(Settings(LOG_LEVEL="warn", ENABLE_LOGGING=False))

    assert calls[0]["level"] == logging.WARNING


def test_main_logs_bind_address_and_starts_uvicorn(monkeypatch, caplog):
    started = {}

    def fake_run(app, **kwargs):
        started.update(kwargs)

    monkeypatch.setattr(server.uvicorn, "run", fake_run)
    monkeypatch.setattr(server, "configure_logging", lambda settings: None)

    with caplog.at_level("INFO", logger="openai_mock.backend.server"):
        server.main(["--host", "127.0.0.1", "--port", "9001", "--log-level", "debug"])

    assert started == {"host": "127.0.0.1", "port": 9001, "log_level": "debug"}
    assert any("127.0.0.1:9001" in record.getMessage() for record in caplog.records)
    assert all("api-key-12345" not in record.getMessage() for record in caplog.records)
