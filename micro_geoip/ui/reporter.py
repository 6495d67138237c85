"""Reporter for acquisition output and progress tracking."""

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from micro_geoip.domain.models import SourceKind


class Reporter:
    """Reporter with rich progress bars and formatted output."""

    def __init__(self, silent: bool = False) -> None:
        """Initialize reporter.

        Args:
            silent: If True, suppress all output (for services and tests).
        """
        self.silent = silent
        self.console = Console(quiet=silent)
        self._download_progress: Progress | None = None

    def report_acquisition_start(self, sources: list[SourceKind]) -> None:
        """Report which sources the cycle will try, in order."""
        if not self.silent:
            order = " → ".join(source.value for source in sources)
            self.console.print(f"Acquiring GeoIP database ({order})...")

    def report_source_failed(self, source: SourceKind, error: Exception) -> None:
        """Report a failed attempt before falling back."""
        self.report_warning(f"{source.value} download failed: {error}")

    def report_acquisition_complete(self, source: SourceKind, path) -> None:
        """Report the source that produced the dataset."""
        if not self.silent:
            self.console.print(
                f"[green]✓[/green] {source.value} database downloaded and extracted to {path}"
            )

    def report_update_start(self) -> None:
        if not self.silent:
            self.console.print("Starting scheduled GeoIP database update...")

    def report_update_complete(self) -> None:
        if not self.silent:
            self.console.print("[green]✓[/green] Scheduled GeoIP database update completed")

    def create_download_progress_hook(self, label: str):
        """Create a progress hook for downloading from one source."""
        if self.silent or self._download_progress is None:

            def hook(downloaded: int, total: int | None) -> None:
                pass

            return hook

        progress = self._download_progress
        task_id = progress.add_task("", total=None, filename=label)

        def hook(downloaded: int, total: int | None) -> None:
            if self._download_progress is None:
                return
            if total is not None and progress.tasks[task_id].total != total:
                progress.update(task_id, total=total)
            progress.update(task_id, completed=downloaded)

        return hook

    def download_context(self):
        """Context manager for download progress display."""
        if self.silent:

            class NoOpContext:
                def __enter__(self):
                    return self

                def __exit__(self, *args):
                    pass

            return NoOpContext()

        class DownloadContext:
            def __init__(ctx_self, reporter):
                ctx_self.reporter = reporter

            def __enter__(ctx_self):
                ctx_self.reporter._download_progress = Progress(
                    TextColumn("[bold blue]{task.fields[filename]}"),
                    BarColumn(),
                    DownloadColumn(),
                    TransferSpeedColumn(),
                    TimeRemainingColumn(),
                    console=ctx_self.reporter.console,
                    expand=True,
                )
                ctx_self.reporter._download_progress.__enter__()
                return ctx_self.reporter._download_progress

            def __exit__(ctx_self, *args):
                if ctx_self.reporter._download_progress:
                    ctx_self.reporter._download_progress.__exit__(*args)
                    ctx_self.reporter._download_progress = None

        return DownloadContext(self)

    def report_warning(self, message: str) -> None:
        """Report a warning message."""
        if not self.silent:
            self.console.print(f"\n[yellow]Warning:[/yellow] {message}")

    def report_error(self, message: str) -> None:
        """Report an error message."""
        if not self.silent:
            self.console.print(f"\n[red]Error:[/red] {message}")
