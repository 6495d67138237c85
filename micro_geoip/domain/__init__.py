"""Domain models and business logic."""

from micro_geoip.domain.errors import (
    AcquisitionError,
    AddressLookupError,
    ExtractError,
    FetchError,
    GeoIPError,
    LoadError,
)
from micro_geoip.domain.models import (
    SOURCE_ARCHIVE_KINDS,
    AcquisitionAttempt,
    ArchiveKind,
    CountryInfo,
    ServiceState,
    SourceKind,
)
from micro_geoip.domain.types import DownloadProgressHook, ExtractionProgressHook

__all__ = [
    "CountryInfo",
    "SourceKind",
    "ArchiveKind",
    "SOURCE_ARCHIVE_KINDS",
    "ServiceState",
    "AcquisitionAttempt",
    "GeoIPError",
    "FetchError",
    "ExtractError",
    "LoadError",
    "AcquisitionError",
    "AddressLookupError",
    "DownloadProgressHook",
    "ExtractionProgressHook",
]
