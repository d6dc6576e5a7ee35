"""Environment-driven settings.

Settings are read from ``REELCACHE_*`` environment variables and an optional
``.env`` file in the working directory:

- REELCACHE_MAX_ENTRIES: local cache capacity (default 500)
- REELCACHE_EVICTION_RATIO: share of capacity dropped per sweep (default 0.2)
- REELCACHE_LOG_LEVEL: root log level (default INFO)
- REELCACHE_ADMIN_TOKEN: when set, required to invalidate cache entries
- REELCACHE_CORS_ORIGINS: comma-separated allowed origins

Unparseable or out-of-range capacity settings fall back to their defaults.
"""

import logging
from typing import Annotated, Any, Optional

from pydantic import Field, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 500
DEFAULT_EVICTION_RATIO = 0.2
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]


class Settings(BaseSettings):
    """Resolved process settings."""

    model_config = SettingsConfigDict(
        env_prefix="REELCACHE_",
        env_file=".env",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    max_entries: int = Field(default=DEFAULT_MAX_ENTRIES, gt=0)
    eviction_ratio: float = Field(default=DEFAULT_EVICTION_RATIO, gt=0, le=1)
    log_level: str = "INFO"
    admin_token: Optional[str] = None
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS)
    )

    @field_validator("max_entries", "eviction_ratio", mode="wrap")
    @classmethod
    def _fall_back_on_bad_value(cls, value: Any, handler, info: ValidationInfo) -> Any:
        try:
            return handler(value)
        except ValidationError:
            default = cls.model_fields[info.field_name].default
            logger.warning(f"[CONFIG] {info.field_name}={value!r} is invalid, using {default}")
            return default

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [o.strip() for o in value.split(",") if o.strip()]
        return value


def load_settings() -> Settings:
    """Read settings from the environment and ``.env``."""
    return Settings()
