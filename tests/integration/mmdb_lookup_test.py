"""Integration tests against real MaxMind DB files read through geoip2."""

import pytest

from micro_geoip.domain.models import CountryInfo, ServiceState
from micro_geoip.service import GeoIPService
from micro_geoip.store import HotSwapStore, load_dataset

DBIP_HOST = "download.db-ip.com"

NETWORKS_V4 = {
    "8.8.8.0/24": {"iso_code": "US", "names": {"en": "United States", "de": "USA"}},
    "134.195.196.0/24": {"iso_code": "DE", "names": {"fr": "Allemagne", "de": "Deutschland"}},
}


@pytest.fixture
def ipv4_store(tmp_path, factory):
    path = factory.mmdb(tmp_path / "GeoLite2-Country.mmdb", NETWORKS_V4)
    store = HotSwapStore()
    store.publish(load_dataset(path))
    yield store
    store.close()


class TestIPv4Database:
    """Test lookups through geoip2.database.Reader."""

    def test_known_address(self, ipv4_store):
        assert ipv4_store.lookup("8.8.8.8") == CountryInfo(code="US", name="United States")

    def test_unmatched_address_is_unknown(self, ipv4_store):
        assert ipv4_store.lookup("203.0.113.9") == CountryInfo(code="Unknown", name="Unknown")

    def test_non_english_fallback(self, ipv4_store):
        assert ipv4_store.lookup("134.195.196.26") == CountryInfo(code="DE", name="Deutschland")

    def test_ipv6_address_in_ipv4_database_is_unknown(self, ipv4_store):
        assert ipv4_store.lookup("2001:db8::1") == CountryInfo.unknown()


def test_ipv6_database(tmp_path, factory):
    path = factory.mmdb(
        tmp_path / "GeoLite2-Country.mmdb",
        {"2001:4860:4860::/48": {"iso_code": "US", "names": {"en": "United States"}}},
        ip_version=6,
    )
    handle = load_dataset(path)
    store = HotSwapStore()
    store.publish(handle)

    try:
        assert store.lookup("2001:4860:4860::8888") == CountryInfo(code="US", name="United States")
        assert store.lookup("2001:db8::1") == CountryInfo.unknown()
    finally:
        store.close()

    assert handle.closed


def test_service_downloads_real_database(tmp_path, settings, source_server, factory):
    mmdb = factory.mmdb(tmp_path / "build.mmdb", NETWORKS_V4)
    source_server.serve(DBIP_HOST, content=factory.gzip(mmdb.read_bytes()))

    with GeoIPService(settings, transport=source_server.transport).start(schedule=False) as service:
        assert service.state is ServiceState.READY
        assert service.get_country("8.8.8.8") == CountryInfo(code="US", name="United States")
        assert service.get_country("203.0.113.9") == CountryInfo.unknown()
