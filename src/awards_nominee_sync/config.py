"""Settings for the nominee sync: TMDb and Claude credentials plus pipeline tunables."""

import os
from functools import lru_cache

from attrs import define

from .errors import ConfigurationError


@define
class Settings:
    """Application settings."""

    tmdb_read_access_token: str
    tmdb_api_key: str | None = None
    claude_api_key: str | None = None
    claude_model: str = "claude-3-5-haiku-latest"
    rate_limit: int = 40
    rate_window: float = 10.0
    request_timeout: float = 30.0
    rate_limit_cooldown: float = 10.0
    cache_ttl: float = 24 * 60 * 60
    batch_size: int = 5
    batch_pause: float = 1.0
    max_attempts: int = 3
    log_level: str = "INFO"


def _number(name: str, default, cast=float):
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


@lru_cache
def get_settings() -> Settings:
    """Read settings from the process environment once; later calls reuse the result."""
    token = os.environ.get("TMDB_READ_ACCESS_TOKEN")
    if not token:
        raise ConfigurationError("TMDB_READ_ACCESS_TOKEN is required")

    return Settings(
        tmdb_read_access_token=token,
        tmdb_api_key=os.environ.get("TMDB_API"),
        claude_api_key=os.environ.get("CLAUDE_API"),
        claude_model=os.environ.get("CLAUDE_MODEL", "claude-3-5-haiku-latest"),
        rate_limit=_number("TMDB_RATE_LIMIT", 40, int),
        rate_window=_number("TMDB_RATE_WINDOW", 10.0),
        request_timeout=_number("TMDB_TIMEOUT", 30.0),
        rate_limit_cooldown=_number("TMDB_COOLDOWN", 10.0),
        cache_ttl=_number("METADATA_CACHE_TTL", 24 * 60 * 60.0),
        batch_size=_number("SYNC_BATCH_SIZE", 5, int),
        batch_pause=_number("SYNC_BATCH_PAUSE", 1.0),
        max_attempts=_number("SYNC_MAX_ATTEMPTS", 3, int),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
