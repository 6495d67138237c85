"""Opened datasets with reference-counted, deferred close."""

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from ipaddress import IPv4Address, IPv6Address
from pathlib import Path

import geoip2.database
import geoip2.errors
import maxminddb

from micro_geoip.domain.errors import LoadError
from micro_geoip.domain.models import CountryInfo
from micro_geoip.domain.services import CountryRecordService

logger = logging.getLogger(__name__)


class DatasetHandle:
    """A queryable dataset bound to a file path.

    Readers ``acquire`` the handle for the duration of one query and
    ``release`` it afterwards. Once the handle is retired the underlying
    reader is closed as soon as no query holds it any more.
    """

    def __init__(self, reader, path: Path):
        self.path = path
        self.loaded_at = datetime.now(timezone.utc)
        self._reader = reader
        self._lock = threading.Lock()
        self._refs = 0
        self._retired = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def references(self) -> int:
        return self._refs

    def acquire(self) -> None:
        """Borrow the handle for a single query."""
        with self._lock:
            if self._closed:
                raise RuntimeError(f"Dataset handle for {self.path} is closed")
            self._refs += 1

    def release(self) -> None:
        """Return a borrowed handle, closing it if it was retired meanwhile."""
        with self._lock:
            self._refs -= 1
            close_now = self._mark_closed_if_unused()
        if close_now:
            self._close_reader()

    def retire(self) -> None:
        """Mark the handle superseded; close now or after the last release."""
        with self._lock:
            self._retired = True
            close_now = self._mark_closed_if_unused()
        if close_now:
            self._close_reader()

    def country(self, address: IPv4Address | IPv6Address) -> CountryInfo:
        """Resolve an address; unmatched addresses map to Unknown."""
        try:
            record = self._reader.country(address)
        except (geoip2.errors.AddressNotFoundError, ValueError):
            # ValueError: IPv6 address against an IPv4-only database
            return CountryInfo.unknown()
        return CountryRecordService.to_country_info(record)

    def _mark_closed_if_unused(self) -> bool:
        # Caller holds self._lock
        if self._retired and self._refs == 0 and not self._closed:
            self._closed = True
            return True
        return False

    def _close_reader(self) -> None:
        try:
            self._reader.close()
        except OSError as e:
            logger.warning(f"Failed to close dataset {self.path}: {e}")
        else:
            logger.debug(f"Closed dataset {self.path}")


def load_dataset(
    path: Path,
    opener: Callable[[str], object] = geoip2.database.Reader,
) -> DatasetHandle:
    """Open and validate the dataset at ``path``.

    Args:
        path: Dataset file location
        opener: Factory returning a reader for a path (geoip2 by default)

    Returns:
        A fresh, unpublished DatasetHandle

    Raises:
        LoadError: ``missing`` if the file is absent, ``corrupt`` if it
            cannot be parsed as a MaxMind DB
    """
    path = Path(path)
    if not path.is_file():
        raise LoadError(LoadError.MISSING, path)

    try:
        reader = opener(str(path))
    except FileNotFoundError as e:
        raise LoadError(LoadError.MISSING, path) from e
    except (maxminddb.InvalidDatabaseError, ValueError, OSError) as e:
        raise LoadError(LoadError.CORRUPT, path, str(e)) from e

    logger.info(f"GeoIP database loaded: {path}")
    return DatasetHandle(reader, path)
