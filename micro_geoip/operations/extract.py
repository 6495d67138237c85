"""Extraction of the dataset from downloaded archives."""

import gzip
import logging
import shutil
import tarfile
import zlib
from pathlib import Path

from atomicwrites import atomic_write

from micro_geoip.domain.errors import ExtractError
from micro_geoip.domain.models import ArchiveKind
from micro_geoip.domain.types import ExtractionProgressHook

logger = logging.getLogger(__name__)

DATASET_SUFFIX = ".mmdb"
DEFAULT_IDENTIFIER = "GeoLite2-Country"

# Errors raised by gzip/tarfile on malformed or truncated input
_ARCHIVE_ERRORS = (tarfile.TarError, OSError, EOFError, zlib.error)


def _matches(member: tarfile.TarInfo, identifier: str, suffix: str) -> bool:
    return member.isfile() and member.name.endswith(suffix) and identifier in member.name


def _prepare_destination(destination: Path) -> None:
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ExtractError(f"Cannot create {destination.parent}: {exc}") from exc


def extract_tar_gz(
    archive_path: Path,
    destination: Path,
    identifier: str = DEFAULT_IDENTIFIER,
    suffix: str = DATASET_SUFFIX,
    progress_hook: ExtractionProgressHook | None = None,
) -> str:
    """Copy the first matching entry of a tar.gz archive to ``destination``.

    Entries are scanned in archive order. The first regular file whose name
    ends with ``suffix`` and contains ``identifier`` wins; later matches are
    ignored.

    Args:
        archive_path: Path to the .tar.gz archive
        destination: Where the dataset is written
        identifier: Substring the entry name must contain
        suffix: Suffix the entry name must end with
        progress_hook: Optional callback(entry_name, entries_scanned)

    Returns:
        Name of the extracted archive entry

    Raises:
        ExtractError: If the archive is malformed or holds no matching entry
    """
    _prepare_destination(destination)
    logger.info(f"Scanning {archive_path} for {identifier}*{suffix}")

    try:
        with tarfile.open(archive_path, mode="r:gz") as tar:
            for scanned, member in enumerate(tar, start=1):
                if progress_hook:
                    progress_hook(member.name, scanned)
                if not _matches(member, identifier, suffix):
                    continue

                extracted = tar.extractfile(member)
                if extracted is None:  # pragma: no cover - isfile() guarantees a fileobj
                    raise ExtractError(f"Failed to read {member.name} from archive")

                with extracted, atomic_write(destination, mode="wb", overwrite=True) as dest:
                    shutil.copyfileobj(extracted, dest)

                logger.info(f"Extracted {member.name} to {destination}")
                return member.name
    except _ARCHIVE_ERRORS as exc:
        raise ExtractError(f"Malformed archive {archive_path}: {exc}") from exc

    raise ExtractError(f"entry not found: no {identifier}*{suffix} in {archive_path}")


def extract_gzip(archive_path: Path, destination: Path) -> None:
    """Decompress a gzip stream straight into ``destination``.

    Raises:
        ExtractError: If the stream is not valid gzip or is truncated
    """
    _prepare_destination(destination)

    try:
        with (
            gzip.open(archive_path, "rb") as src,
            atomic_write(destination, mode="wb", overwrite=True) as dest,
        ):
            shutil.copyfileobj(src, dest)
    except _ARCHIVE_ERRORS as exc:
        raise ExtractError(f"Malformed gzip stream {archive_path}: {exc}") from exc

    logger.info(f"Decompressed {archive_path} to {destination}")


def extract_archive(
    archive_path: Path,
    kind: ArchiveKind,
    destination: Path,
    identifier: str = DEFAULT_IDENTIFIER,
    progress_hook: ExtractionProgressHook | None = None,
) -> None:
    """Extract the dataset from an archive of the given kind.

    The destination only changes once the dataset has been written in full.
    """
    if kind is ArchiveKind.TAR_GZ:
        extract_tar_gz(
            archive_path, destination, identifier=identifier, progress_hook=progress_hook
        )
    elif kind is ArchiveKind.GZIP:
        extract_gzip(archive_path, destination)
    else:
        raise ExtractError(f"Unsupported archive kind: {kind}")
