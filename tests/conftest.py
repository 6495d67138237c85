"""Configure tests."""

import gzip
import io
import tarfile
from functools import partial
from pathlib import Path
from types import SimpleNamespace

import geoip2.errors
import httpx
import orjson
import pytest
from mmdb_writer import MMDBWriter
from netaddr import IPSet

from micro_geoip.config import Settings
from micro_geoip.store import load_dataset

MAXMIND_HOST = "download.maxmind.com"
DBIP_HOST = "download.db-ip.com"


class FakeReader:
    """Stands in for geoip2.database.Reader over a JSON dataset."""

    def __init__(self, records: dict[str, dict], tag: str = ""):
        self.records = records
        self.tag = tag
        self.closed = False
        self.queries = 0

    def country(self, address):
        self.queries += 1
        key = str(address)
        if key not in self.records:
            raise geoip2.errors.AddressNotFoundError(f"The address {key} is not in the database.")
        country = self.records[key]
        if country is None:
            return SimpleNamespace(country=None)
        return SimpleNamespace(
            country=SimpleNamespace(iso_code=country.get("iso_code"), names=country.get("names", {}))
        )

    def close(self):
        self.closed = True


def open_json_dataset(path: str) -> FakeReader:
    """Open a JSON test dataset, failing like geoip2 on garbage."""
    try:
        payload = orjson.loads(Path(path).read_bytes())
    except orjson.JSONDecodeError as e:
        raise ValueError(f"Not a dataset: {e}") from e
    return FakeReader(payload["records"], payload.get("tag", ""))


def dataset_bytes(records: dict[str, dict | None], tag: str = "") -> bytes:
    """Serialize a JSON test dataset understood by open_json_dataset."""
    return orjson.dumps({"tag": tag, "records": records})


def country(code: str, name: str, **other_names: str) -> dict:
    return {"iso_code": code, "names": {"en": name, **other_names}}


def make_tar_gz(entries: list[tuple[str, bytes]]) -> bytes:
    """Build a tar.gz archive in memory, keeping entry order."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in entries:
            tarinfo = tarfile.TarInfo(name=name)
            tarinfo.size = len(content)
            tar.addfile(tarinfo, fileobj=io.BytesIO(content))
    return buffer.getvalue()


def make_gzip(content: bytes) -> bytes:
    return gzip.compress(content)


def write_mmdb(path: Path, networks: dict[str, dict], ip_version: int = 4) -> Path:
    """Write a real GeoLite2-Country style .mmdb mapping CIDRs to country records."""
    writer = MMDBWriter(
        ip_version=ip_version,
        database_type="GeoLite2-Country",
        languages=["en"],
        description="micro-geoip test database",
    )
    for network, record in networks.items():
        writer.insert_network(IPSet([network]), {"country": record})
    writer.to_db_file(str(path))
    return path


@pytest.fixture
def json_loader():
    """Dataset loader reading JSON test datasets."""
    return partial(load_dataset, opener=open_json_dataset)


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings isolated from the environment, without a license key."""
    monkeypatch.chdir(tmp_path)
    for name in ("GEOIP_MAXMIND_LICENSE_KEY", "GEOIP_PREFER_DBIP", "GEOIP_DATABASE_PATH"):
        monkeypatch.delenv(name, raising=False)
    return Settings(
        database_path=tmp_path / "data" / "GeoLite2-Country.mmdb",
        maxmind_license_key=None,
        download_timeout=5.0,
    )


@pytest.fixture
def licensed_settings(settings):
    """Settings with a MaxMind license key configured."""
    return settings.model_copy(update={"maxmind_license_key": "secret-key"})


class SourceServer:
    """Routes mocked downloads by host and records requested hosts."""

    def __init__(self):
        self.responses: dict[str, httpx.Response | Exception] = {}
        self.requested: list[str] = []

    def serve(self, host: str, status: int = 200, content: bytes = b"") -> None:
        self.responses[host] = httpx.Response(status, content=content)

    def fail(self, host: str, error: Exception) -> None:
        self.responses[host] = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requested.append(request.url.host)
        response = self.responses.get(request.url.host)
        if response is None:
            return httpx.Response(404)
        if isinstance(response, Exception):
            raise response
        return httpx.Response(response.status_code, content=response.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def source_server():
    """Mocked MaxMind and DB-IP download endpoints."""
    return SourceServer()


@pytest.fixture
def factory():
    """Builders for archives, datasets and fake readers."""
    return SimpleNamespace(
        tar_gz=make_tar_gz,
        gzip=make_gzip,
        dataset=dataset_bytes,
        country=country,
        reader=FakeReader,
        mmdb=write_mmdb,
    )
