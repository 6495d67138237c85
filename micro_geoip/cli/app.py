"""Typer-based CLI for the GeoIP database."""

import logging
from datetime import datetime
from typing import Optional

import orjson
import typer
from rich.logging import RichHandler

from micro_geoip.config import Settings
from micro_geoip.domain.errors import AcquisitionError, AddressLookupError, LoadError
from micro_geoip.domain.models import CountryInfo, ServiceState
from micro_geoip.orchestrators import Acquisition
from micro_geoip.store import HotSwapStore, load_dataset
from micro_geoip.ui import Reporter
from micro_geoip.ui.tables import create_lookup_table, create_status_table

app = typer.Typer(help="GeoIP database maintenance")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show log output"),
) -> None:
    """Show help when no subcommand is provided."""
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(show_path=False)],
        )
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command()
def download(
    prefer_dbip: Optional[bool] = typer.Option(
        None, "--prefer-dbip/--prefer-maxmind", help="Override which source is tried first"
    ),
):
    """Download and extract the database once."""
    reporter = Reporter()
    config = Settings()
    if prefer_dbip is not None:
        config = config.model_copy(update={"prefer_dbip": prefer_dbip})

    try:
        Acquisition(config).acquire(reporter)
    except AcquisitionError as e:
        reporter.report_error(str(e))
        raise typer.Exit(1)


@app.command()
def lookup(
    addresses: list[str] = typer.Argument(..., help="IP addresses to resolve"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
):
    """Resolve addresses against the local database."""
    config = Settings()
    reporter = Reporter()

    try:
        handle = load_dataset(config.database_path)
    except LoadError as e:
        reporter.report_error(f"{e}. Run 'download' first.")
        raise typer.Exit(1)

    store = HotSwapStore()
    store.publish(handle)
    results: dict[str, CountryInfo | Exception] = {}
    try:
        for address in addresses:
            try:
                results[address] = store.lookup(address)
            except AddressLookupError as e:
                results[address] = e
    finally:
        store.close()

    if as_json:
        payload = {
            address: (
                {"error": str(result)}
                if isinstance(result, Exception)
                else result.model_dump()
            )
            for address, result in results.items()
        }
        typer.echo(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())
    else:
        reporter.console.print(create_lookup_table(results))

    if any(isinstance(result, Exception) for result in results.values()):
        raise typer.Exit(1)


@app.command()
def status():
    """Show the local database file and whether it loads."""
    config = Settings()
    reporter = Reporter()
    path = config.database_path

    try:
        load_dataset(path).retire()
        state = ServiceState.READY
    except LoadError:
        state = ServiceState.NEVER_INITIALIZED

    exists = path.is_file()
    stat = path.stat() if exists else None
    reporter.console.print(
        create_status_table(
            {
                "path": path,
                "state": state.value,
                "exists": exists,
                "size": stat.st_size if stat else 0,
                "modified": datetime.fromtimestamp(stat.st_mtime) if stat else None,
                "update_interval": config.update_interval,
            }
        )
    )


if __name__ == "__main__":
    app()
