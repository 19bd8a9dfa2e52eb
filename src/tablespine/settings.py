"""Environment-driven settings for tablespine.

``TableSpineSettings`` reads ``TABLESPINE_*`` environment variables (and a
``.env`` file when present) and validates them with pydantic at load time.

Examples:
    >>> import os
    >>> os.environ["TABLESPINE_DATABASE_URL"] = "sqlite:///app.db"
    >>> get_settings(_force_reload=True).database_url
    'sqlite:///app.db'

Fields
──────
database_url          : "memory", a file path, ``sqlite:///…`` or ``postgresql://…``
database_echo         : Log every SQL statement (SQLAlchemy backends)
database_pool_size    : Pool size for non-SQLite engines
database_max_overflow : Overflow connections for non-SQLite engines
autocommit            : ``autocommit`` of accessors built with ``TableAccessor.from_settings``
log_level             : structlog level
log_format            : ``json`` or ``console``
service_name          : ``service.name`` on every log record

Tags:
    settings, configuration, pydantic, environment, tablespine

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TableSpineSettings(BaseSettings):
    """Settings shared by connection factories and logging setup."""

    model_config = SettingsConfigDict(
        env_prefix="TABLESPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(
        default="memory",
        description='"memory", a SQLite path, or a SQLAlchemy-style URL',
    )
    database_echo: bool = False
    database_pool_size: int = Field(default=5, ge=1)
    database_max_overflow: int = Field(default=10, ge=0)
    autocommit: bool = True

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "console"
    service_name: str = "tablespine"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, TableSpineSettings] = {}


def get_settings(*, _force_reload: bool = False) -> TableSpineSettings:
    """Load, validate, and cache a :class:`TableSpineSettings` instance.

    Parameters
    ----------
    _force_reload:
        Bypass cache and re-read the environment.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = TableSpineSettings()
    _settings_cache["default"] = settings
    return settings


__all__ = ["TableSpineSettings", "get_settings"]
