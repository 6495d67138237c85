"""Domain models for the GeoIP service."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

UNKNOWN = "Unknown"


class SourceKind(str, Enum):
    """Remote origin of a dataset."""

    MAXMIND = "maxmind"  # Primary, requires a license key
    DBIP = "dbip"  # Secondary, free


class ArchiveKind(str, Enum):
    """Distribution format of a downloaded dataset."""

    TAR_GZ = "tar.gz"  # Archive holding the dataset among other entries
    GZIP = "gz"  # The dataset itself, compressed


SOURCE_ARCHIVE_KINDS: dict[SourceKind, ArchiveKind] = {
    SourceKind.MAXMIND: ArchiveKind.TAR_GZ,
    SourceKind.DBIP: ArchiveKind.GZIP,
}


class ServiceState(str, Enum):
    """Availability of lookups at the service level."""

    NEVER_INITIALIZED = "never_initialized"
    READY = "ready"
    DEGRADED = "degraded"  # Serving stale data after a failed refresh


class CountryInfo(BaseModel):
    """Country resolved for an IP address."""

    model_config = ConfigDict(frozen=True)

    code: str = UNKNOWN  # ISO-3166 alpha-2 code
    name: str = UNKNOWN

    @classmethod
    def unknown(cls) -> "CountryInfo":
        """Return the sentinel for addresses without geolocation data."""
        return cls()


class AcquisitionAttempt(BaseModel):
    """Record of one source attempt within an acquisition cycle."""

    source: SourceKind
    temp_path: Path | None = None
    succeeded: bool = False
    error: str | None = None
