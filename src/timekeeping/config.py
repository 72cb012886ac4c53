"""Configuration management for the timekeeping engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

import pytz
from dotenv import load_dotenv

from timekeeping.calculators.clock import DEFAULT_CIVIL_TIMEZONE
from timekeeping.exceptions import ValidationError


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    engine_version: str
    civil_timezone: str
    scan_cooldown_seconds: int
    duplicate_window_seconds: int
    host: str
    port: int
    debug: bool
    log_level: str

    def __post_init__(self) -> None:
        if self.civil_timezone not in pytz.all_timezones_set:
            raise ValidationError("civil_timezone", self.civil_timezone, "unknown timezone")
        if self.scan_cooldown_seconds < 0:
            raise ValidationError("scan_cooldown_seconds", self.scan_cooldown_seconds)
        if self.duplicate_window_seconds < 0:
            raise ValidationError("duplicate_window_seconds", self.duplicate_window_seconds)

    @property
    def HOST(self) -> str:
        """Alias for host."""
        return self.host

    @property
    def PORT(self) -> int:
        """Alias for port."""
        return self.port

    @property
    def DEBUG(self) -> bool:
        """Alias for debug."""
        return self.debug

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            database_url=os.getenv(
                "DATABASE_URL",
                "sqlite+aiosqlite:///./timekeeping.db",
            ),
            engine_version=os.getenv("ENGINE_VERSION", "1.0.0"),
            civil_timezone=os.getenv("CIVIL_TIMEZONE", DEFAULT_CIVIL_TIMEZONE),
            scan_cooldown_seconds=int(os.getenv("SCAN_COOLDOWN_SECONDS", "60")),
            duplicate_window_seconds=int(os.getenv("DUPLICATE_WINDOW_SECONDS", "300")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()


settings = get_settings()
