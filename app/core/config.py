"""Application configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

from sqlalchemy.engine import make_url

DEFAULT_DATABASE_URL = "sqlite:///./users.db"
DEFAULT_PAGE_SIZE = 20
DEFAULT_MAX_PAGE_SIZE = 1000
DEFAULT_SEED_USERS = 20
DEFAULT_LOG_LEVEL = "INFO"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def redact_database_url(url: str) -> str:
    """Return the database URL with any password hidden."""
    return make_url(url).render_as_string(hide_password=True)


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the user API."""

    database_url: str
    default_page_size: int
    max_page_size: int
    seed_users: int
    seed_on_startup: bool
    create_schema: bool
    log_level: str

    def safe_for_logging(self) -> dict[str, str | int | bool]:
        """Return settings safe for logs."""
        return {
            "database_url": redact_database_url(self.database_url),
            "default_page_size": self.default_page_size,
            "max_page_size": self.max_page_size,
            "seed_users": self.seed_users,
            "seed_on_startup": self.seed_on_startup,
            "create_schema": self.create_schema,
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load application settings from the environment."""
    return Settings(
        database_url=os.getenv("USERAPI_DATABASE_URL", DEFAULT_DATABASE_URL),
        default_page_size=_get_int_env("USERAPI_DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        max_page_size=_get_int_env("USERAPI_MAX_PAGE_SIZE", DEFAULT_MAX_PAGE_SIZE),
        seed_users=_get_int_env("USERAPI_SEED_USERS", DEFAULT_SEED_USERS),
        seed_on_startup=_get_bool_env("USERAPI_SEED_ON_STARTUP", True),
        create_schema=_get_bool_env("USERAPI_CREATE_SCHEMA", True),
        log_level=os.getenv("USERAPI_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )
