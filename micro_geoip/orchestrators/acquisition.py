"""Dataset acquisition orchestrator.

Downloads the dataset from the preferred source, falls back to the other one,
and lands the extracted result at the canonical dataset path.
"""

import logging

import httpx

from micro_geoip.config import Settings
from micro_geoip.domain.errors import AcquisitionError, GeoIPError
from micro_geoip.domain.models import SOURCE_ARCHIVE_KINDS, AcquisitionAttempt, SourceKind
from micro_geoip.domain.services import SourceOrderService, SourceUrlService
from micro_geoip.operations.download import fetched_file
from micro_geoip.operations.extract import extract_archive
from micro_geoip.ui import Reporter

logger = logging.getLogger(__name__)


class Acquisition:
    """Orchestrates one acquisition cycle across the configured sources.

    Each source is tried at most once per cycle. When every source fails the
    canonical dataset file is left exactly as it was.
    """

    def __init__(
        self,
        config: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the acquisition orchestrator.

        Args:
            config: Service configuration. If None, creates new Settings() from environment.
            transport: Optional httpx transport used for every download.
        """
        self.config = config if config is not None else Settings()
        self.transport = transport
        self.order_service = SourceOrderService()
        self.url_service = SourceUrlService()
        self.attempts: list[AcquisitionAttempt] = []

    def source_order(self) -> list[SourceKind]:
        return self.order_service.get_source_order(
            self.config.has_license_key, self.config.prefer_dbip
        )

    def acquire(self, reporter: Reporter | None = None) -> SourceKind:
        """Run one acquisition cycle.

        Args:
            reporter: Optional reporter for progress. Defaults to a silent one.

        Returns:
            The source whose dataset now sits at the canonical path

        Raises:
            AcquisitionError: If every source in the cycle failed
        """
        if reporter is None:
            reporter = Reporter(silent=True)

        sources = self.source_order()
        self.attempts = []
        causes: dict[SourceKind, GeoIPError] = {}

        logger.info(f"Acquiring GeoIP database from {', '.join(s.value for s in sources)}")
        reporter.report_acquisition_start(sources)

        with reporter.download_context():
            for source in sources:
                attempt = AcquisitionAttempt(source=source)
                self.attempts.append(attempt)

                try:
                    self._run_attempt(attempt, reporter)
                except GeoIPError as e:
                    attempt.error = str(e)
                    causes[source] = e
                    logger.warning(f"{source.value} download failed: {e}")
                    reporter.report_source_failed(source, e)
                    continue

                logger.info(
                    f"{source.value} GeoIP database downloaded and extracted to "
                    f"{self.config.database_path}"
                )
                reporter.report_acquisition_complete(source, self.config.database_path)
                return source

        error = AcquisitionError(
            primary_cause=causes.get(SourceKind.MAXMIND),
            secondary_cause=causes.get(SourceKind.DBIP),
        )
        logger.error(f"GeoIP database acquisition failed: {error}")
        raise error

    def _run_attempt(self, attempt: AcquisitionAttempt, reporter: Reporter) -> None:
        """Fetch, extract and land the dataset from one source."""
        kind = SOURCE_ARCHIVE_KINDS[attempt.source]
        url = self._source_url(attempt.source)
        logger.info(f"Downloading GeoIP database from {self.url_service.redact(url)}")

        with fetched_file(
            url,
            suffix=f".{kind.value}",
            timeout=self.config.download_timeout,
            progress_hook=reporter.create_download_progress_hook(attempt.source.value),
            transport=self.transport,
        ) as archive_path:
            attempt.temp_path = archive_path
            extract_archive(
                archive_path,
                kind,
                self.config.database_path,
                identifier=self.config.maxmind_edition_id,
            )

        attempt.succeeded = True

    def _source_url(self, source: SourceKind) -> str:
        if source is SourceKind.MAXMIND:
            return self.url_service.maxmind_url(
                self.config.maxmind_url,
                self.config.maxmind_license_key or "",
                self.config.maxmind_edition_id,
            )
        return self.url_service.dbip_url(self.config.dbip_url)
