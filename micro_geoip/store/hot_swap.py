"""Atomically swappable holder of the active dataset."""

import ipaddress
import logging
import threading

from micro_geoip.domain.errors import AddressLookupError
from micro_geoip.domain.models import CountryInfo
from micro_geoip.store.handle import DatasetHandle

logger = logging.getLogger(__name__)


def _parse_address(ip: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    if not isinstance(ip, str):
        raise AddressLookupError(AddressLookupError.INVALID_ADDRESS, repr(ip))
    try:
        return ipaddress.ip_address(ip)
    except ValueError as e:
        raise AddressLookupError(AddressLookupError.INVALID_ADDRESS, ip) from e


class HotSwapStore:
    """Owns the active DatasetHandle and serves lookups from it.

    The lock only guards reading or replacing the active reference; queries
    run outside of it, so a publish never waits for in-flight lookups.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: DatasetHandle | None = None
        self._closed = False

    @property
    def active(self) -> DatasetHandle | None:
        return self._active

    @property
    def has_dataset(self) -> bool:
        return self._active is not None

    def publish(self, handle: DatasetHandle) -> None:
        """Make ``handle`` the active dataset and retire the previous one.

        After ``close`` the handle is retired straight away instead.
        """
        with self._lock:
            closed = self._closed
            previous = self._active
            if not closed:
                self._active = handle

        if closed:
            handle.retire()
            logger.info(f"Store closed, discarded dataset {handle.path}")
            return

        if previous is not None and previous is not handle:
            previous.retire()
        logger.info(f"Published dataset {handle.path}")

    def lookup(self, ip: str) -> CountryInfo:
        """Resolve ``ip`` against the active dataset.

        Raises:
            AddressLookupError: ``invalid address`` for malformed input,
                ``unavailable`` when nothing has been published
        """
        address = _parse_address(ip)

        with self._lock:
            handle = self._active
            if handle is None:
                raise AddressLookupError(AddressLookupError.UNAVAILABLE)
            handle.acquire()

        try:
            return handle.country(address)
        finally:
            handle.release()

    def close(self) -> None:
        """Unpublish the active dataset; it closes once lookups drain."""
        with self._lock:
            previous, self._active = self._active, None
            self._closed = True

        if previous is not None:
            previous.retire()
