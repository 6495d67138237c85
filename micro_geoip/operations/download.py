"""Source downloads into scoped temporary files."""

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import httpx

from micro_geoip.domain.errors import FetchError
from micro_geoip.domain.services import SourceUrlService
from micro_geoip.domain.types import DownloadProgressHook

logger = logging.getLogger(__name__)


def _content_length(resp: httpx.Response) -> int | None:
    total = resp.headers.get("Content-Length")
    if total is None or not total.strip().isdigit():
        return None
    return int(total)


def download_file(
    url: str,
    dest: Path,
    client: httpx.Client,
    progress_hook: DownloadProgressHook | None = None,
    chunk_size: int = 64 * 1024,
) -> None:
    """Download a single file and report progress via callback."""
    with client.stream("GET", url) as resp:
        if not resp.is_success:
            raise FetchError(SourceUrlService.redact(url), status=resp.status_code)

        total_bytes = _content_length(resp)

        downloaded = 0
        if progress_hook:
            progress_hook(downloaded, total_bytes)

        with dest.open("wb") as f:
            for chunk in resp.iter_bytes(chunk_size=chunk_size):
                f.write(chunk)
                downloaded += len(chunk)
                if progress_hook:
                    progress_hook(downloaded, total_bytes)


def fetch(
    url: str,
    dest: Path,
    timeout: float = 60.0,
    progress_hook: DownloadProgressHook | None = None,
    transport: httpx.BaseTransport | None = None,
) -> None:
    """Download ``url`` into ``dest``, mapping every failure to FetchError.

    Runs synchronously on the calling thread, so it is safe to call from
    inside a running event loop.

    Args:
        url: Source URL, may carry credentials
        dest: File to write the response body to
        timeout: Transport timeout in seconds
        progress_hook: Optional callback(downloaded, total)
        transport: Optional transport override (used by tests)
    """
    redacted = SourceUrlService.redact(url)
    try:
        with httpx.Client(timeout=timeout, transport=transport, follow_redirects=True) as client:
            download_file(url, dest, client, progress_hook)
    except httpx.TimeoutException as exc:
        raise FetchError(redacted, cause="timeout") from exc
    except httpx.HTTPError as exc:
        raise FetchError(redacted, cause=str(exc) or type(exc).__name__) from exc
    except OSError as exc:
        raise FetchError(redacted, cause=f"cannot write {dest}: {exc}") from exc


@contextmanager
def fetched_file(
    url: str,
    suffix: str = "",
    timeout: float = 60.0,
    progress_hook: DownloadProgressHook | None = None,
    transport: httpx.BaseTransport | None = None,
) -> Iterator[Path]:
    """Download ``url`` to a temporary file that is removed on exit.

    The file is deleted whether the download, or the work done inside the
    ``with`` block, succeeds or fails.

    Example:
        with fetched_file(url, suffix=".tar.gz") as archive:
            extract_archive(archive, ArchiveKind.TAR_GZ, destination)
    """
    fd, name = tempfile.mkstemp(prefix="geoip-", suffix=suffix)
    os.close(fd)
    temp_path = Path(name)
    try:
        logger.debug(f"Downloading {SourceUrlService.redact(url)} to {temp_path}")
        fetch(url, temp_path, timeout, progress_hook, transport)
        yield temp_path
    finally:
        temp_path.unlink(missing_ok=True)
