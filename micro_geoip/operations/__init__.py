"""Dataset operations.

Public API:
    Download operations:
        - fetched_file: Download into a temporary file scoped to a with block
        - fetch: Async download with error mapping
        - download_file: Streaming download

    Extract operations:
        - extract_archive: Dispatch on ArchiveKind
        - extract_tar_gz: First matching entry of a tar.gz archive
        - extract_gzip: Whole gzip stream
"""

from micro_geoip.operations.download import download_file, fetch, fetched_file
from micro_geoip.operations.extract import extract_archive, extract_gzip, extract_tar_gz

__all__ = [
    # Download operations
    "fetched_file",
    "fetch",
    "download_file",
    # Extract operations
    "extract_archive",
    "extract_tar_gz",
    "extract_gzip",
]
