"""Service configuration with environment variable support."""

import logging
import re
from datetime import timedelta
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_INTERVAL = timedelta(days=30)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(h|ms|m|s)")
_DURATION_UNITS = {
    "h": "hours",
    "m": "minutes",
    "s": "seconds",
    "ms": "milliseconds",
}


def parse_duration(value: str) -> timedelta | None:
    """Parse a Go-style duration such as ``720h`` or ``1h30m``.

    Returns None when the string is not a well-formed duration.
    """
    text = value.strip().lower()
    if not text:
        return None
    if text.isdigit():
        return timedelta(seconds=int(text))

    position = 0
    total = timedelta()
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            return None
        amount, unit = match.groups()
        total += timedelta(**{_DURATION_UNITS[unit]: float(amount)})
        position = match.end()

    if position != len(text):
        return None
    return total


class Settings(BaseSettings):
    """GeoIP service configuration loaded from environment variables.

    Loads from environment (GEOIP_*), .env file, or defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="GEOIP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Sources
    maxmind_license_key: str | None = None
    maxmind_url: str = "https://download.maxmind.com/app/geoip_download"
    maxmind_edition_id: str = "GeoLite2-Country"
    dbip_url: str = "https://download.db-ip.com/free/dbip-country-lite-{YYYY-MM}.mmdb.gz"
    prefer_dbip: bool = False
    download_timeout: float = 60.0

    # Storage
    database_path: Path = Path("data/GeoLite2-Country.mmdb")

    # Scheduling
    update_interval: timedelta = DEFAULT_UPDATE_INTERVAL

    @property
    def has_license_key(self) -> bool:
        """Return True if the primary source can be used."""
        return bool(self.maxmind_license_key)

    @field_validator("maxmind_license_key", mode="before")
    @classmethod
    def parse_empty_key(cls, v: str | None) -> str | None:
        """Treat blank keys as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("update_interval", mode="before")
    @classmethod
    def parse_interval(cls, v):
        """Accept Go-style durations, falling back to the default when invalid."""
        if not isinstance(v, str):
            return v
        parsed = parse_duration(v)
        if parsed is not None:
            return parsed
        if v.strip().upper().startswith("P"):
            return v  # ISO 8601, pydantic handles it
        logger.warning(f"Invalid update interval {v!r}, using default ({DEFAULT_UPDATE_INTERVAL})")
        return DEFAULT_UPDATE_INTERVAL

    @field_validator("update_interval", mode="after")
    @classmethod
    def positive_interval(cls, v: timedelta) -> timedelta:
        """Reject intervals that would spin the scheduler."""
        if v <= timedelta(0):
            raise ValueError("update_interval must be positive")
        return v

    @field_validator("database_path", mode="after")
    @classmethod
    def create_parent_dir(cls, v: Path) -> Path:
        """Create the dataset directory if it doesn't exist."""
        v.parent.mkdir(parents=True, exist_ok=True)
        return v.resolve()
