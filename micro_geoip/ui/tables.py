"""Table rendering utilities for CLI output."""

from rich.table import Table

from micro_geoip.domain.models import UNKNOWN, CountryInfo


def create_lookup_table(results: dict[str, CountryInfo | Exception]) -> Table:
    """Create a table for displaying lookup results.

    Args:
        results: Mapping of queried address to its CountryInfo, or to the
            error the lookup raised

    Returns:
        Rich Table object ready for display
    """
    table = Table(title=f"Lookups ({len(results)} total)")
    table.add_column("Address", style="cyan")
    table.add_column("Code", style="white")
    table.add_column("Country", style="white")

    for address, result in results.items():
        if isinstance(result, Exception):
            table.add_row(address, "-", f"[red]{result}[/red]")
        elif result.code == UNKNOWN:
            table.add_row(address, f"[dim]{result.code}[/dim]", f"[dim]{result.name}[/dim]")
        else:
            table.add_row(address, result.code, result.name)

    return table


def create_status_table(status: dict) -> Table:
    """Create a key/value table describing the local dataset.

    Args:
        status: Dictionary with path, exists, size, modified, state keys

    Returns:
        Rich Table object ready for display
    """
    table = Table(title="GeoIP Database", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Path", str(status["path"]))
    table.add_row("State", status["state"])
    if status["exists"]:
        table.add_row("Size", f"{status['size'] / 1024 / 1024:.1f} MB")
        table.add_row("Modified", status["modified"].strftime("%Y-%m-%d %H:%M"))
    else:
        table.add_row("Size", "-")
        table.add_row("Modified", "-")
    table.add_row("Update interval", str(status["update_interval"]))

    return table
