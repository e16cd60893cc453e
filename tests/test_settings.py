from __future__ import annotations

import pytest
from pydantic import ValidationError

from config.settings import Settings, get_settings


def test_defaults() -> None:
    settings = get_settings()

    assert settings.event_port == 9000
    assert settings.event_schema_version == 2
    assert settings.event_receive_timeout is None
    assert get_settings() is settings


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EVENT_PORT", "9100")
    monkeypatch.setenv("EVENT_SCHEMA_VERSION", "1")
    monkeypatch.setenv("LOG_LEVEL", " debug ")

    settings = Settings()

    assert settings.event_port == 9100
    assert settings.event_schema_version == 1
    assert settings.log_level == "DEBUG"


def test_invalid_schema_version_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EVENT_SCHEMA_VERSION", "7")
    with pytest.raises(ValidationError):
        Settings()
