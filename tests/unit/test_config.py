"""Unit tests for environment-driven settings."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from app.core.config import DEFAULT_DATABASE_URL
from app.core.config import get_settings
from app.core.config import redact_database_url

_VARIABLES = (
    "USERAPI_DATABASE_URL",
    "USERAPI_DEFAULT_PAGE_SIZE",
    "USERAPI_MAX_PAGE_SIZE",
    "USERAPI_SEED_USERS",
    "USERAPI_SEED_ON_STARTUP",
    "USERAPI_CREATE_SCHEMA",
    "USERAPI_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    for name in _VARIABLES:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults() -> None:
    settings = get_settings()

    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.default_page_size == 20
    assert settings.max_page_size == 1000
    assert settings.seed_users == 20
    assert settings.seed_on_startup is True
    assert settings.create_schema is True
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("USERAPI_DATABASE_URL", "sqlite://")
    monkeypatch.setenv("USERAPI_DEFAULT_PAGE_SIZE", "5")
    monkeypatch.setenv("USERAPI_SEED_ON_STARTUP", "no")
    monkeypatch.setenv("USERAPI_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.database_url == "sqlite://"
    assert settings.default_page_size == 5
    assert settings.seed_on_startup is False
    assert settings.log_level == "DEBUG"


def test_invalid_flag_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("USERAPI_CREATE_SCHEMA", "maybe")

    with pytest.raises(ValueError, match="USERAPI_CREATE_SCHEMA"):
        get_settings()


def test_safe_for_logging_hides_password(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("USERAPI_DATABASE_URL", "postgresql+psycopg://api:secret@db:5432/users")

    logged = get_settings().safe_for_logging()

    assert "secret" not in logged["database_url"]
    assert logged["database_url"] == redact_database_url("postgresql+psycopg://api:secret@db:5432/users")
