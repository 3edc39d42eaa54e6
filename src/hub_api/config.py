"""Configuration loading for hub-api-client.

Configuration comes from the environment. The token is a secret and is never
logged or included in error messages.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import ConfigError
from .hosts import GITHUB_HOST

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True, slots=True)
class HubConfig:
    """Host binding and runtime settings."""

    host: str = GITHUB_HOST
    user: str = ""
    token: str = ""
    log_level: str = "WARNING"


def _parse_host(value: str | None) -> str:
    if not value or not value.strip():
        return GITHUB_HOST
    host = value.strip().lower()
    if "://" in host or "/" in host or " " in host:
        raise ConfigError("GITHUB_HOST must be a bare hostname (no scheme or path)")
    return host


def _parse_log_level(value: str | None) -> str:
    if not value:
        return "WARNING"
    level = value.strip().upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"HUB_LOG_LEVEL must be one of {', '.join(sorted(_LOG_LEVELS))}")
    return level


def load_config_from_env() -> HubConfig:
    """Load and validate configuration from environment variables.

    Raises:
        ConfigError: If a value is invalid.
    """
    return HubConfig(
        host=_parse_host(os.getenv("GITHUB_HOST")),
        user=(os.getenv("GITHUB_USER") or "").strip(),
        token=(os.getenv("GITHUB_TOKEN") or "").strip(),
        log_level=_parse_log_level(os.getenv("HUB_LOG_LEVEL")),
    )
