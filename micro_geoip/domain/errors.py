"""Error taxonomy for the dataset lifecycle."""


class GeoIPError(Exception):
    """Base class for all service errors."""


class FetchError(GeoIPError):
    """Download failed at the transport or HTTP status level."""

    def __init__(self, url: str, status: int | None = None, cause: str | None = None):
        self.url = url
        self.status = status
        self.cause = cause
        if status is not None:
            message = f"Download failed with status {status}: {url}"
        else:
            message = f"Download failed ({cause}): {url}"
        super().__init__(message)

    @property
    def timed_out(self) -> bool:
        return self.cause == "timeout"


class ExtractError(GeoIPError):
    """Archive was malformed or did not contain the dataset."""


class LoadError(GeoIPError):
    """Dataset file could not be opened."""

    MISSING = "missing"
    CORRUPT = "corrupt"

    def __init__(self, reason: str, path, detail: str | None = None):
        self.reason = reason
        self.path = path
        message = f"Dataset {reason}: {path}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class AcquisitionError(GeoIPError):
    """Every configured source failed during one acquisition cycle."""

    def __init__(
        self,
        primary_cause: Exception | None = None,
        secondary_cause: Exception | None = None,
    ):
        self.primary_cause = primary_cause
        self.secondary_cause = secondary_cause
        causes = [
            f"{label}: {cause}"
            for label, cause in (("primary", primary_cause), ("secondary", secondary_cause))
            if cause is not None
        ]
        message = "no source available"
        if causes:
            message = f"{message} ({'; '.join(causes)})"
        super().__init__(message)


class AddressLookupError(GeoIPError):
    """A single lookup could not be answered."""

    INVALID_ADDRESS = "invalid address"
    UNAVAILABLE = "unavailable"

    def __init__(self, reason: str, address: str | None = None):
        self.reason = reason
        self.address = address
        if address is not None:
            super().__init__(f"{reason}: {address}")
        else:
            super().__init__(reason)
