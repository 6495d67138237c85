"""Unit tests for dataset handles and the hot-swap store."""

import threading
from pathlib import Path

import pytest

from micro_geoip.domain.errors import AddressLookupError, LoadError
from micro_geoip.domain.models import CountryInfo
from micro_geoip.store import DatasetHandle, HotSwapStore, load_dataset


@pytest.fixture
def records(factory):
    return {
        "8.8.8.8": factory.country("US", "United States"),
        "2001:4860:4860::8888": factory.country("US", "United States"),
        "134.195.196.26": {"iso_code": "DE", "names": {"fr": "Allemagne", "de": "Deutschland"}},
        "10.0.0.1": None,
    }


@pytest.fixture
def store(records, factory):
    store = HotSwapStore()
    store.publish(DatasetHandle(factory.reader(records), Path("v1.mmdb")))
    return store


class TestLookup:
    """Test lookups against the active dataset."""

    def test_known_address(self, store):
        assert store.lookup("8.8.8.8") == CountryInfo(code="US", name="United States")

    def test_ipv6_address(self, store):
        assert store.lookup("2001:4860:4860::8888").code == "US"

    def test_unmatched_address_is_unknown(self, store):
        assert store.lookup("203.0.113.9") == CountryInfo(code="Unknown", name="Unknown")

    def test_match_without_country_is_unknown(self, store):
        assert store.lookup("10.0.0.1") == CountryInfo.unknown()

    def test_non_english_fallback(self, store):
        assert store.lookup("134.195.196.26") == CountryInfo(code="DE", name="Deutschland")

    @pytest.mark.parametrize("ip", ["not-an-ip", "", "256.1.1.1", "8.8.8", "::g", " 8.8.8.8"])
    def test_invalid_address(self, store, ip):
        with pytest.raises(AddressLookupError) as exc_info:
            store.lookup(ip)

        assert exc_info.value.reason == AddressLookupError.INVALID_ADDRESS

    def test_non_string_is_invalid(self, store):
        with pytest.raises(AddressLookupError) as exc_info:
            store.lookup(134744072)

        assert exc_info.value.reason == AddressLookupError.INVALID_ADDRESS

    def test_unavailable_before_publish(self):
        with pytest.raises(AddressLookupError) as exc_info:
            HotSwapStore().lookup("8.8.8.8")

        assert exc_info.value.reason == AddressLookupError.UNAVAILABLE

    def test_invalid_address_checked_before_availability(self):
        with pytest.raises(AddressLookupError) as exc_info:
            HotSwapStore().lookup("not-an-ip")

        assert exc_info.value.reason == AddressLookupError.INVALID_ADDRESS

    def test_invalid_address_does_not_touch_handle(self, store):
        reader = store.active._reader

        with pytest.raises(AddressLookupError):
            store.lookup("not-an-ip")

        assert reader.queries == 0


class TestPublish:
    """Test swapping datasets."""

    def test_publish_replaces_and_closes_previous(self, store, factory):
        old_reader = store.active._reader
        new_reader = factory.reader({"8.8.8.8": factory.country("CA", "Canada")})

        store.publish(DatasetHandle(new_reader, Path("v2.mmdb")))

        assert store.lookup("8.8.8.8").code == "CA"
        assert old_reader.closed
        assert not new_reader.closed

    def test_close_deferred_while_borrowed(self, store, factory):
        old = store.active
        old.acquire()

        store.publish(DatasetHandle(factory.reader({}), Path("v2.mmdb")))

        assert not old.closed
        old.release()
        assert old.closed
        assert old._reader.closed

    def test_in_flight_lookup_finishes_on_old_dataset(self, factory):
        entered = threading.Event()
        proceed = threading.Event()

        class SlowReader(factory.reader):
            def country(self, address):
                entered.set()
                assert proceed.wait(5)
                return super().country(address)

        store = HotSwapStore()
        old_reader = SlowReader({"8.8.8.8": factory.country("US", "United States")})
        store.publish(DatasetHandle(old_reader, Path("v1.mmdb")))

        results = []
        worker = threading.Thread(target=lambda: results.append(store.lookup("8.8.8.8")))
        worker.start()
        assert entered.wait(5)

        new_reader = factory.reader({"8.8.8.8": factory.country("CA", "Canada")})
        store.publish(DatasetHandle(new_reader, Path("v2.mmdb")))

        # Publish returned while the old lookup is still running
        assert store.lookup("8.8.8.8").code == "CA"
        assert not old_reader.closed

        proceed.set()
        worker.join(5)

        assert results == [CountryInfo(code="US", name="United States")]
        assert old_reader.closed
        assert not new_reader.closed

    def test_concurrent_lookups_see_whole_datasets(self, factory):
        """Every lookup resolves fully against one dataset version."""
        versions = [
            {
                "8.8.8.8": factory.country(code, name),
                "1.1.1.1": factory.country(code, name),
            }
            for code, name in [("US", "United States"), ("CA", "Canada"), ("MX", "Mexico")]
        ]
        allowed = {
            (r["8.8.8.8"]["iso_code"], r["8.8.8.8"]["names"]["en"]) for r in versions
        }
        store = HotSwapStore()
        store.publish(DatasetHandle(factory.reader(versions[0]), Path("v0.mmdb")))

        seen = []
        errors = []
        stop = threading.Event()

        def read():
            while not stop.is_set():
                try:
                    info = store.lookup("1.1.1.1")
                except Exception as e:
                    errors.append(e)
                    return
                seen.append((info.code, info.name))

        readers = [threading.Thread(target=read) for _ in range(4)]
        for thread in readers:
            thread.start()
        for i in range(30):
            version = versions[i % len(versions)]
            store.publish(DatasetHandle(factory.reader(version), Path(f"v{i}.mmdb")))
        stop.set()
        for thread in readers:
            thread.join(5)

        assert errors == []
        assert set(seen) <= allowed

    def test_publish_after_close_discards(self, store, factory):
        store.close()
        reader = factory.reader({"8.8.8.8": factory.country("CA", "Canada")})

        store.publish(DatasetHandle(reader, Path("late.mmdb")))

        assert reader.closed
        assert not store.has_dataset

    def test_republish_same_handle_keeps_it_open(self, store):
        handle = store.active

        store.publish(handle)

        assert not handle.closed
        assert store.lookup("8.8.8.8").code == "US"

    def test_close_unpublishes(self, store):
        reader = store.active._reader

        store.close()

        assert reader.closed
        assert not store.has_dataset
        with pytest.raises(AddressLookupError, match="unavailable"):
            store.lookup("8.8.8.8")


class TestLoadDataset:
    """Test opening dataset files."""

    def test_missing(self, tmp_path):
        with pytest.raises(LoadError) as exc_info:
            load_dataset(tmp_path / "absent.mmdb")

        assert exc_info.value.reason == LoadError.MISSING

    def test_corrupt(self, tmp_path):
        path = tmp_path / "corrupt.mmdb"
        path.write_bytes(b"this is not a MaxMind DB file" * 64)

        with pytest.raises(LoadError) as exc_info:
            load_dataset(path)

        assert exc_info.value.reason == LoadError.CORRUPT

    def test_custom_opener(self, tmp_path, json_loader, factory):
        path = tmp_path / "db.mmdb"
        path.write_bytes(factory.dataset({"8.8.8.8": factory.country("US", "United States")}))

        handle = json_loader(path)

        assert handle.path == path
        assert handle.references == 0
        assert not handle.closed
