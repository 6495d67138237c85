"""micro_geoip.

Country lookups against a locally cached GeoIP database that refreshes itself
from MaxMind or DB-IP.

Quick Start:
    >>> from micro_geoip import create_service
    >>> service = create_service()  # Loads or downloads the database
    >>> service.get_country("8.8.8.8")
    CountryInfo(code='US', name='United States')
    >>> service.close()

Configuration:
    >>> from micro_geoip import Settings
    >>> import os
    >>> os.environ["GEOIP_MAXMIND_LICENSE_KEY"] = "..."
    >>> config = Settings()  # Loads from environment

    >>> # Or configure programmatically
    >>> config = Settings(
    ...     database_path="data/GeoLite2-Country.mmdb",
    ...     update_interval="720h",
    ...     prefer_dbip=True,
    ... )

Public API:
    High-level functions:
        - create_service: Build, warm and schedule a GeoIPService
        - download_database: Run one acquisition cycle

    Service:
        - GeoIPService: Lookups plus dataset lifecycle
        - GeoIPLookup: Protocol implemented by services
        - MockGeoIPService: In-memory stand-in

    Configuration:
        - Settings: Configuration model

    Domain Models:
        - CountryInfo: Lookup result
        - SourceKind, ArchiveKind, ServiceState: Enumerations

    Errors:
        - GeoIPError and its subclasses
"""

# Configuration
from micro_geoip.config import Settings

# Domain models
from micro_geoip.domain import (
    AcquisitionError,
    AddressLookupError,
    ArchiveKind,
    CountryInfo,
    ExtractError,
    FetchError,
    GeoIPError,
    LoadError,
    ServiceState,
    SourceKind,
)
from micro_geoip.mock import MockGeoIPService

# Orchestrators
from micro_geoip.orchestrators import Acquisition, RefreshScheduler
from micro_geoip.service import GeoIPLookup, GeoIPService

# UI Reporters
from micro_geoip.ui import Reporter

__all__ = [
    # High-level functions
    "create_service",
    "download_database",
    # Service
    "GeoIPService",
    "GeoIPLookup",
    "MockGeoIPService",
    # Orchestrators
    "Acquisition",
    "RefreshScheduler",
    # Configuration
    "Settings",
    # Domain models
    "CountryInfo",
    "SourceKind",
    "ArchiveKind",
    "ServiceState",
    # Errors
    "GeoIPError",
    "FetchError",
    "ExtractError",
    "LoadError",
    "AcquisitionError",
    "AddressLookupError",
    # Reporters
    "Reporter",
]

# Version
__version__ = "0.1.0"


def create_service(config: Settings | None = None, schedule: bool = True) -> GeoIPService:
    """Create a ready GeoIPService (high-level convenience function).

    Loads the local database, downloading it first if needed, and starts the
    periodic update thread.

    Args:
        config: Service configuration. If None, uses environment settings.
        schedule: Start periodic updates.

    Raises:
        AcquisitionError: If no database exists locally and none can be downloaded
        LoadError: If the downloaded database cannot be opened
    """
    return GeoIPService(config).start(schedule=schedule)


def download_database(
    config: Settings | None = None,
    reporter: Reporter | None = None,
) -> SourceKind:
    """Download and extract the database once (high-level convenience function).

    Returns:
        The source the database came from
    """
    return Acquisition(config).acquire(reporter)
