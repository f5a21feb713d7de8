"""
Centralized settings for workspine.

Manifesto:
    Hosts configure the library through ``WORKSPINE_*`` environment variables
    or a ``.env`` file instead of sprinkling constants across modules.
    ``WorkspineSettings`` is validated once and cached.

Tags:
    workspine, configuration, settings, pydantic, caching

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from workspine.core.logging import configure_logging


class WorkspineSettings(BaseSettings):
    """Workspine configuration.

    Fields
    ──────
    log_level     : structlog level (DEBUG, INFO, ...)
    log_format    : "json" for log aggregation, "console" for development
    service_name  : value of ``service.name`` in every log line
    database_url  : default URL for ``create_workspine_engine``
    database_echo : echo SQL emitted by the engine
    """

    model_config = SettingsConfigDict(
        env_prefix="WORKSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")
    service_name: str = Field(default="workspine")

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(default="sqlite:///workspine.db")
    database_echo: bool = Field(default=False)


_settings_cache: dict[str, WorkspineSettings] = {}


def get_settings(*, _force_reload: bool = False) -> WorkspineSettings:
    """Load, validate, and cache a :class:`WorkspineSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = WorkspineSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


def configure_logging_from_settings(settings: WorkspineSettings | None = None) -> None:
    """Apply the logging fields of *settings* (or the cached settings)."""
    settings = settings or get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_format == "json",
        service=settings.service_name,
    )
