"""Business logic services for the dataset lifecycle."""

import re
from datetime import datetime, timezone
from urllib.parse import quote, urlencode

from micro_geoip.domain.models import UNKNOWN, CountryInfo, SourceKind

PREFERRED_LOCALE = "en"


class SourceOrderService:
    """Service for deciding which sources an acquisition cycle tries."""

    @staticmethod
    def get_source_order(has_license_key: bool, prefer_dbip: bool) -> list[SourceKind]:
        """Return sources in the order they should be attempted.

        MaxMind goes first when a license key is configured and DB-IP is not
        explicitly preferred. MaxMind is only ever included when a key exists.

        Args:
            has_license_key: Whether a MaxMind license key is configured
            prefer_dbip: Whether DB-IP should be tried first

        Returns:
            Ordered list of sources, each appearing at most once
        """
        if has_license_key and not prefer_dbip:
            return [SourceKind.MAXMIND, SourceKind.DBIP]
        if has_license_key:
            return [SourceKind.DBIP, SourceKind.MAXMIND]
        return [SourceKind.DBIP]


class SourceUrlService:
    """Service for building download URLs of each source."""

    MONTH_PLACEHOLDER = "{YYYY-MM}"

    @staticmethod
    def maxmind_url(base_url: str, license_key: str, edition_id: str) -> str:
        """Build the MaxMind download URL for a tar.gz edition."""
        query = urlencode(
            {"edition_id": edition_id, "license_key": license_key, "suffix": "tar.gz"},
            quote_via=quote,
        )
        return f"{base_url}?{query}"

    @classmethod
    def dbip_url(cls, template: str, now: datetime | None = None) -> str:
        """Substitute the current month into the DB-IP URL template."""
        now = now or datetime.now(timezone.utc)
        return template.replace(cls.MONTH_PLACEHOLDER, now.strftime("%Y-%m"), 1)

    @staticmethod
    def redact(url: str) -> str:
        """Hide credentials before a URL reaches a log line."""
        return re.sub(r"(license_key=)[^&]*", r"\1***", url)


class CountryRecordService:
    """Service for turning reader records into CountryInfo values."""

    @staticmethod
    def pick_name(names: dict[str, str] | None) -> str:
        """Choose a display name from a locale-to-name mapping.

        English wins. Otherwise the name under the lexicographically smallest
        locale key is used so the result never depends on map ordering.
        """
        if not names:
            return UNKNOWN
        if names.get(PREFERRED_LOCALE):
            return names[PREFERRED_LOCALE]
        for locale in sorted(names):
            if names[locale]:
                return names[locale]
        return UNKNOWN

    @classmethod
    def to_country_info(cls, record) -> CountryInfo:
        """Convert a geoip2 country response into a CountryInfo."""
        country = getattr(record, "country", None)
        if country is None:
            return CountryInfo.unknown()

        return CountryInfo(
            code=country.iso_code or UNKNOWN,
            name=cls.pick_name(country.names),
        )
