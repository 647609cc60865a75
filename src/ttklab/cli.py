"""
TTKLab CLI - Command Line Interface for weapon TTK analytics

Provides commands for:
- Dataset summaries and per-type statistics
- Filtered, sorted weapon tables in any fire mode
- Top-N and best-at-range rankings
- Head-to-head weapon comparison
- Exporting the filtered view back to CSV or JSON
"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ttklab import __version__
from ttklab.analysis.aggregate import (
    best_at_range,
    compare_weapons,
    overall_statistics,
    summarize_by_type,
    type_statistics,
)
from ttklab.analysis.metrics import FireMode, calculate_ttk_for_mode, get_damage_dropoff
from ttklab.analysis.query import sort_weapons, top_n
from ttklab.core.config import configure_logging, get_config
from ttklab.core.constants import RANGES
from ttklab.core.models import AnalysisContext, FilterCriteria, WeaponRecord, records_by_name
from ttklab.core.utils import format_number, format_ttk
from ttklab.export import default_export_filename, export_to_csv, export_to_json
from ttklab.ingest.loader import DatasetLoadError, WeaponDataset
from ttklab.ingest.normalizer import corrections_from_mapping

app = typer.Typer(
    name="ttklab",
    help="Weapon time-to-kill analytics from per-range damage data",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]TTKLab[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output"),
) -> None:
    """TTKLab - weapon TTK analytics"""
    configure_logging(get_config().logging)
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


# =============================================================================
# Helpers
# =============================================================================


def _load_context(
    source: Optional[str],
    types: Optional[list[str]] = None,
    search: str = "",
    complete_only: bool = False,
    rpm_min: Optional[float] = None,
    rpm_max: Optional[float] = None,
) -> AnalysisContext:
    config = get_config()
    dataset = WeaponDataset(
        source or config.ingest.data_source,
        corrections=corrections_from_mapping(config.ingest.damage_corrections),
        timeout=config.ingest.timeout_seconds,
        encoding=config.ingest.encoding,
    )
    try:
        dataset.load()
    except DatasetLoadError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    filters = FilterCriteria.build(
        types=types,
        search_text=search,
        complete_only=complete_only,
        rpm_min=rpm_min,
        rpm_max=rpm_max,
    )
    return dataset.context(filters)


def _check_range(range_label: str) -> str:
    if range_label not in RANGES:
        console.print(f"[red]Error:[/red] Unknown range {range_label}. Use one of: {', '.join(RANGES)}")
        raise typer.Exit(1)
    return range_label


def _weapon_table(
    weapons: tuple[WeaponRecord, ...],
    range_label: str,
    mode: str,
    title: str,
) -> Table:
    table = Table(title=title)
    table.add_column("Type", style="cyan")
    table.add_column("Weapon", style="bold")
    for r in RANGES:
        table.add_column(r, justify="right")
    table.add_column("RPM", justify="right")
    table.add_column("DPS", justify="right")
    table.add_column("ADS", justify="right")
    table.add_column(f"TTK {range_label}", justify="right", style="green")
    table.add_column("Status")

    for weapon in weapons:
        status = "[green]Complete[/green]" if weapon.is_complete else "[yellow]Incomplete[/yellow]"
        table.add_row(
            weapon.weapon_type,
            weapon.name,
            *(format_number(weapon.damage_at(r)) for r in RANGES),
            format_number(weapon.rpm),
            format_number(weapon.dps),
            format_number(weapon.ads_time),
            format_ttk(calculate_ttk_for_mode(weapon, range_label, mode)),
            status,
        )
    return table


# Shared filter options
SOURCE_ARG = typer.Argument(None, help="CSV path or URL (defaults to the configured data source)")
TYPE_OPT = typer.Option(None, "--type", "-t", help="Weapon type to include (repeatable, ALL = every type)")
SEARCH_OPT = typer.Option("", "--search", "-s", help="Case-insensitive match on name or type")
COMPLETE_OPT = typer.Option(False, "--complete-only", help="Only weapons with complete data")
RPM_MIN_OPT = typer.Option(None, "--rpm-min", help="Minimum RPM (inclusive)")
RPM_MAX_OPT = typer.Option(None, "--rpm-max", help="Maximum RPM (inclusive)")


# =============================================================================
# Commands
# =============================================================================


@app.command()
def summary(source: Optional[str] = SOURCE_ARG) -> None:
    """Show dataset totals, coverage and a per-type breakdown."""
    context = _load_context(source)
    stats = overall_statistics(context.records)

    console.print(
        Panel(
            f"Weapons: [bold]{stats['total']}[/bold]\n"
            f"Complete: [bold]{stats['complete']}/{stats['total']}[/bold]\n"
            f"Types: [bold]{stats['types']}[/bold]\n"
            f"Coverage: [bold]{stats['coverage']}%[/bold]",
            title="Dataset Summary",
        )
    )

    by_type = summarize_by_type(context.records)
    table = Table(title="By Type")
    table.add_column("Type", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Complete", justify="right")
    table.add_column("Avg RPM", justify="right")
    for row in by_type.to_dict(orient="records"):
        avg_rpm = None if pd.isna(row["avg_rpm"]) else round(float(row["avg_rpm"]), 1)
        table.add_row(
            row["weapon_type"],
            str(row["count"]),
            str(int(row["complete"])),
            format_number(avg_rpm),
        )
    console.print(table)


@app.command("table")
def weapon_table(
    source: Optional[str] = SOURCE_ARG,
    types: Optional[list[str]] = TYPE_OPT,
    search: str = SEARCH_OPT,
    complete_only: bool = COMPLETE_OPT,
    rpm_min: Optional[float] = RPM_MIN_OPT,
    rpm_max: Optional[float] = RPM_MAX_OPT,
    sort: str = typer.Option("ttk", "--sort", help="Sort by: ttk, damage, rpm, dps"),
    range_label: str = typer.Option("10M", "--range", "-r", help="Range for TTK/damage"),
    mode: FireMode = typer.Option(FireMode.HIP, "--mode", "-m", help="Fire mode for the TTK column"),
) -> None:
    """List weapons matching the filters."""
    range_label = _check_range(range_label)
    context = _load_context(source, types, search, complete_only, rpm_min, rpm_max)
    weapons = sort_weapons(context.view(), sort, range_label)

    if not weapons:
        console.print("[yellow]No weapons match the filters.[/yellow]")
        return
    console.print(_weapon_table(weapons, range_label, mode, f"Weapons ({len(weapons)})"))


@app.command()
def top(
    source: Optional[str] = SOURCE_ARG,
    n: int = typer.Option(5, "--count", "-n", help="Number of weapons"),
    metric: str = typer.Option("ttk", "--metric", help="Rank by: ttk, damage, rpm, dps"),
    range_label: str = typer.Option("10M", "--range", "-r", help="Range for TTK/damage"),
    types: Optional[list[str]] = TYPE_OPT,
) -> None:
    """Show the top weapons by a metric."""
    range_label = _check_range(range_label)
    context = _load_context(source, types)
    weapons = top_n(context.view(), n, metric, range_label)
    console.print(_weapon_table(weapons, range_label, FireMode.HIP, f"Top {n} by {metric} @ {range_label}"))


@app.command()
def best(
    source: Optional[str] = SOURCE_ARG,
    types: Optional[list[str]] = TYPE_OPT,
) -> None:
    """Show the fastest-killing weapon at every range."""
    context = _load_context(source, types)
    view = context.view()

    table = Table(title="Best Weapon by Range")
    table.add_column("Range")
    table.add_column("Weapon", style="bold")
    table.add_column("Type", style="cyan")
    table.add_column("TTK", justify="right", style="green")
    for range_label in RANGES:
        weapon = best_at_range(view, range_label)
        if weapon is None:
            table.add_row(range_label, "N/A", "N/A", "N/A")
        else:
            table.add_row(range_label, weapon.name, weapon.weapon_type, format_ttk(weapon.ttk_at(range_label)))
    console.print(table)


@app.command("type-stats")
def type_stats(
    weapon_type: str = typer.Argument(..., help="Exact weapon type, e.g. 'ASSAULT RIFLE'"),
    source: Optional[str] = typer.Option(None, "--source", help="CSV path or URL"),
) -> None:
    """Show RPM and per-range damage statistics for one weapon type."""
    context = _load_context(source)
    stats = type_statistics(context.records, weapon_type)
    if stats is None:
        console.print(f"[yellow]No weapons of type {weapon_type}.[/yellow]")
        raise typer.Exit(1)

    console.print(f"[bold]{weapon_type}[/bold]: {stats['count']} weapons, {stats['complete']} complete")
    table = Table()
    table.add_column("Stat")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Avg", justify="right")
    if "rpm" in stats:
        rpm = stats["rpm"]
        table.add_row("RPM", format_number(rpm["min"]), format_number(rpm["max"]), f"{rpm['avg']:.1f}")
    for range_label, dmg in stats["ranges"].items():
        table.add_row(
            f"Damage {range_label}",
            format_number(dmg["min"]),
            format_number(dmg["max"]),
            f"{dmg['avg']:.1f}",
        )
    console.print(table)


@app.command()
def compare(
    weapon_a: str = typer.Argument(..., help="First weapon name"),
    weapon_b: str = typer.Argument(..., help="Second weapon name"),
    source: Optional[str] = typer.Option(None, "--source", help="CSV path or URL"),
) -> None:
    """Compare two weapons range by range."""
    context = _load_context(source)
    comparison = compare_weapons(context.records, weapon_a, weapon_b)
    if comparison is None:
        console.print("[red]Error:[/red] Both weapons must exist in the dataset.")
        raise typer.Exit(1)

    name_a, name_b = comparison["weapons"]
    table = Table(title=f"{name_a} vs {name_b}")
    table.add_column("Range")
    table.add_column(f"{name_a} dmg", justify="right")
    table.add_column(f"{name_b} dmg", justify="right")
    table.add_column(f"{name_a} TTK", justify="right")
    table.add_column(f"{name_b} TTK", justify="right")
    table.add_column("STK", justify="right")
    for range_label, values in comparison["ranges"].items():
        stk_a, stk_b = values["stk"]
        table.add_row(
            range_label,
            *(format_number(d) for d in values["damage"]),
            *(format_ttk(t) for t in values["ttk"]),
            f"{format_number(stk_a)} / {format_number(stk_b)}",
        )
    console.print(table)

    records = records_by_name(context.records)
    for name in (name_a, name_b):
        dropoff = get_damage_dropoff(records[name], RANGES[0], RANGES[-1])
        suffix = "N/A" if dropoff is None else f"{dropoff}%"
        console.print(f"{name} drop-off {RANGES[0]} -> {RANGES[-1]}: {suffix}")


@app.command()
def export(
    source: Optional[str] = SOURCE_ARG,
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (.csv or .json); defaults to a dated CSV name",
    ),
    types: Optional[list[str]] = TYPE_OPT,
    search: str = SEARCH_OPT,
    complete_only: bool = COMPLETE_OPT,
    rpm_min: Optional[float] = RPM_MIN_OPT,
    rpm_max: Optional[float] = RPM_MAX_OPT,
    sort: str = typer.Option("", "--sort", help="Sort by: ttk, damage, rpm, dps (default: dataset order)"),
    range_label: str = typer.Option("10M", "--range", "-r", help="Range for TTK/damage sorting"),
) -> None:
    """Export the filtered view in the dataset's column layout."""
    config = get_config()
    context = _load_context(source, types, search, complete_only, rpm_min, rpm_max)
    weapons = sort_weapons(context.view(), sort, range_label)

    if not weapons:
        console.print("[yellow]No data to export.[/yellow]")
        raise typer.Exit(1)

    output = output or Path(default_export_filename(date.today(), config.export.filename_template))
    if output.suffix.lower() == ".json":
        export_to_json(weapons, output, indent=config.export.json_indent)
    else:
        export_to_csv(weapons, output, delimiter=config.export.csv_delimiter)

    console.print(f"[green]Exported {len(weapons)} weapons to {output}[/green]")


if __name__ == "__main__":
    app()
