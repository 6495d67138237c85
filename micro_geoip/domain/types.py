"""Shared type definitions."""

from collections.abc import Callable

# Progress hook for download operations (downloaded bytes, total bytes)
DownloadProgressHook = Callable[[int, int | None], None]

# Progress hook for tar scanning (entry name, entries scanned)
ExtractionProgressHook = Callable[[str, int], None]
