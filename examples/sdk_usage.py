"""Example: Using micro_geoip as an SDK.

This example demonstrates how to embed micro_geoip in a Python program,
for instance behind a web framework's request handlers.
"""

import os
from pathlib import Path

from micro_geoip import (
    AddressLookupError,
    GeoIPService,
    MockGeoIPService,
    Reporter,
    Settings,
    create_service,
    download_database,
)


def example_simple_usage():
    """Simplest usage - use defaults, download if needed, schedule updates."""
    print("=" * 60)
    print("Example 1: Simple Usage")
    print("=" * 60)

    service = create_service()
    try:
        info = service.get_country("8.8.8.8")
        print(f"8.8.8.8 -> {info.code} ({info.name})")
    finally:
        service.close()


def example_with_environment_config():
    """Load configuration from environment variables."""
    print("\n" + "=" * 60)
    print("Example 2: Environment Configuration")
    print("=" * 60)

    # Set environment variables
    os.environ["GEOIP_MAXMIND_LICENSE_KEY"] = "your-license-key"
    os.environ["GEOIP_UPDATE_INTERVAL"] = "168h"

    settings = Settings()
    print(f"Loaded config: interval={settings.update_interval}, key set={settings.has_license_key}")

    with GeoIPService(settings).start() as service:
        print(service.get_country("1.1.1.1"))


def example_one_off_download():
    """Download the database once, e.g. while building a container image."""
    print("\n" + "=" * 60)
    print("Example 3: One-off Download")
    print("=" * 60)

    settings = Settings(
        database_path=Path("build/GeoLite2-Country.mmdb"),
        prefer_dbip=True,
    )

    # Rich progress bars in a terminal; pass Reporter(silent=True) for cron jobs
    source = download_database(config=settings, reporter=Reporter())
    print(f"Database downloaded from {source.value}")


def example_request_handler():
    """Answer lookups the way an HTTP handler would."""
    print("\n" + "=" * 60)
    print("Example 4: Request Handler")
    print("=" * 60)

    # Swap in MockGeoIPService in handler tests
    backend = MockGeoIPService()

    for ip in ["8.8.8.8", "203.0.113.9", "not-an-ip"]:
        try:
            info = backend.get_country(ip)
        except AddressLookupError as e:
            print(f"{ip}: 400 Bad Request ({e})")
            continue
        print(f"{ip}: {info.model_dump()}")


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("micro_geoip SDK Examples")
    print("=" * 60)
    print("\nThese examples show different ways to use micro_geoip")
    print("as a Python library (SDK) in your own code.\n")

    # Uncomment the examples you want to run:

    # example_simple_usage()
    # example_with_environment_config()
    # example_one_off_download()
    example_request_handler()

    print("\nTo run another example, uncomment it in the __main__ section.")
