"""GeoIP service facade used by request handlers."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

import httpx

from micro_geoip.config import Settings
from micro_geoip.domain.models import CountryInfo, ServiceState
from micro_geoip.orchestrators import Acquisition, RefreshScheduler
from micro_geoip.store import DatasetHandle, HotSwapStore, load_dataset
from micro_geoip.ui import Reporter

logger = logging.getLogger(__name__)


class GeoIPLookup(Protocol):
    """What request handlers need from a GeoIP backend."""

    def get_country(self, ip: str) -> CountryInfo: ...

    def close(self) -> None: ...


class GeoIPService:
    """Owns the active dataset, its acquisition and its refresh schedule.

    Example:
        with GeoIPService(Settings()).start() as service:
            info = service.get_country("8.8.8.8")
    """

    def __init__(
        self,
        config: Settings | None = None,
        reporter: Reporter | None = None,
        transport: httpx.BaseTransport | None = None,
        loader: Callable[[Path], DatasetHandle] = load_dataset,
    ):
        """Initialize the service without touching disk or network.

        Args:
            config: Service configuration. If None, creates new Settings() from environment.
            reporter: Reporter for acquisition output. Defaults to a silent one.
            transport: Optional httpx transport used for downloads.
            loader: Function opening the dataset file.
        """
        self.config = config if config is not None else Settings()
        self.store = HotSwapStore()
        self.acquisition = Acquisition(self.config, transport=transport)
        self.scheduler = RefreshScheduler(
            self.store,
            self.acquisition,
            self.config.database_path,
            self.config.update_interval,
            reporter=reporter,
            loader=loader,
        )

    @property
    def state(self) -> ServiceState:
        return self.scheduler.state

    def start(self, schedule: bool = True) -> "GeoIPService":
        """Warm the dataset and start periodic updates.

        Raises:
            AcquisitionError: If no dataset is available and none can be downloaded
            LoadError: If the downloaded dataset cannot be opened
        """
        self.scheduler.initialize()
        if schedule:
            self.scheduler.start()
        return self

    def refresh(self) -> bool:
        """Run one refresh cycle now; False if skipped or failed."""
        return self.scheduler.run_cycle()

    def get_country(self, ip: str) -> CountryInfo:
        """Resolve the country of ``ip``.

        Raises:
            AddressLookupError: For malformed addresses or before a dataset is loaded
        """
        return self.store.lookup(ip)

    def close(self) -> None:
        """Stop updates and release the active dataset."""
        self.scheduler.stop(timeout=self.config.download_timeout)
        self.store.close()
        logger.info("GeoIP service closed")

    def __enter__(self) -> "GeoIPService":
        return self

    def __exit__(self, exc_type, _exc_value, _traceback) -> bool:
        self.close()
        return False
