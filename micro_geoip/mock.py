"""In-memory GeoIP backend for tests of request handling code."""

from micro_geoip.domain.models import CountryInfo

ERROR_CODE = "ERROR"


class MockGeoIPService:
    """Answers lookups from a fixed map instead of a dataset.

    Unknown addresses resolve to Unknown/Unknown, like a real dataset miss.
    """

    def __init__(self, countries: dict[str, CountryInfo] | None = None):
        if countries is None:
            countries = {
                "8.8.8.8": CountryInfo(code="US", name="United States"),
                "1.1.1.1": CountryInfo(code="US", name="United States"),
                "208.67.222.222": CountryInfo(code="US", name="United States"),
                "134.195.196.26": CountryInfo(code="DE", name="Germany"),
                "2001:4860:4860::8888": CountryInfo(code="US", name="United States"),
            }
        self.countries = countries

    def get_country(self, ip: str) -> CountryInfo:
        return self.countries.get(ip, CountryInfo.unknown())

    def close(self) -> None:
        pass

    def set_country(self, ip: str, code: str, name: str) -> None:
        self.countries[ip] = CountryInfo(code=code, name=name)

    def add_error(self, ip: str) -> None:
        """Make ``ip`` resolve to the ERROR marker."""
        self.countries[ip] = CountryInfo(code=ERROR_CODE, name=ERROR_CODE)
