"""Refresh scheduler.

Warms the store at startup and re-runs acquisition on a fixed period.
"""

import logging
import threading
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path

from micro_geoip.domain.errors import GeoIPError, LoadError
from micro_geoip.domain.models import ServiceState
from micro_geoip.orchestrators.acquisition import Acquisition
from micro_geoip.store import DatasetHandle, HotSwapStore, load_dataset
from micro_geoip.ui import Reporter

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Keeps the store's dataset fresh from a single background thread.

    At most one cycle runs at a time: a trigger that arrives while a cycle is
    in progress is dropped.
    """

    def __init__(
        self,
        store: HotSwapStore,
        acquisition: Acquisition,
        database_path: Path,
        interval: timedelta,
        reporter: Reporter | None = None,
        loader: Callable[[Path], DatasetHandle] = load_dataset,
    ):
        self.store = store
        self.acquisition = acquisition
        self.database_path = database_path
        self.interval = interval
        self.reporter = reporter if reporter is not None else Reporter(silent=True)
        self.loader = loader
        self.state = ServiceState.NEVER_INITIALIZED
        self._cycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def initialize(self) -> None:
        """Load the local dataset, acquiring one first if it is unusable.

        Raises:
            AcquisitionError: If no dataset was local and no source worked
            LoadError: If the freshly acquired dataset cannot be opened
        """
        with self._cycle_lock:
            try:
                handle = self.loader(self.database_path)
            except LoadError as e:
                logger.warning(f"Failed to load existing database: {e}")
                logger.info("Downloading initial GeoIP database...")
                self.acquisition.acquire(self.reporter)
                handle = self.loader(self.database_path)

            self.store.publish(handle)
            self.state = ServiceState.READY

    def run_cycle(self) -> bool:
        """Run one refresh cycle unless another is already in progress.

        Returns:
            True if a new dataset was published
        """
        if not self._cycle_lock.acquire(blocking=False):
            logger.info("GeoIP database update already running, skipping this trigger")
            return False

        try:
            return self._refresh()
        finally:
            self._cycle_lock.release()

    def start(self) -> None:
        """Start the periodic refresh thread."""
        if self.running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="geoip-refresh", daemon=True)
        self._thread.start()
        logger.info(f"Scheduled automatic database updates every {self.interval}")

    def stop(self, timeout: float | None = None) -> None:
        """Stop the refresh thread, waiting up to ``timeout`` seconds."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval.total_seconds()):
            self.run_cycle()

    def _refresh(self) -> bool:
        logger.info("Starting scheduled GeoIP database update...")
        self.reporter.report_update_start()

        try:
            self.acquisition.acquire(self.reporter)
            handle = self.loader(self.database_path)
        except GeoIPError as e:
            self._fail(f"Scheduled database update failed: {e}")
            return False
        except Exception as e:
            logger.exception("Unexpected error during scheduled database update")
            self._fail(f"Scheduled database update failed: {e}")
            return False

        self.store.publish(handle)
        self.state = ServiceState.READY
        logger.info("Scheduled GeoIP database update completed successfully")
        self.reporter.report_update_complete()
        return True

    def _fail(self, message: str) -> None:
        logger.error(message)
        self.reporter.report_error(message)
        if self.state is ServiceState.READY:
            self.state = ServiceState.DEGRADED
