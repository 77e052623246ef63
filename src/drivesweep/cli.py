"""CLI interface for drivesweep."""

from collections.abc import Callable
from pathlib import Path
from typing import Optional, TypeVar

import typer
from pydantic import ValidationError
from rich.markup import escape

from drivesweep import __version__
from drivesweep.categories import CATEGORY_TABLE, describe, get_category_ids
from drivesweep.config import Settings, get_config_path, load_settings, save_settings
from drivesweep.display import (
    confirm_action,
    console,
    print_json,
    show_categories,
    show_category_items,
    show_cleanup_preview,
    show_cleanup_result,
    show_hibernation,
    show_large_items,
    show_scanning_progress,
    show_settings,
    show_volume_info,
)
from drivesweep.errors import DriveSweepError
from drivesweep.log import setup_logging
from drivesweep.models import CategoryStats, CleanRequest
from drivesweep.service import Sweeper

T = TypeVar("T")

app = typer.Typer(
    name="drivesweep",
    help="Reclaim space on the Windows system drive",
    add_completion=False,
)


def make_sweeper() -> Sweeper:
    """Build the service with the user's settings."""
    return Sweeper(settings=load_settings())


def run_operation(description: str, operation: Callable[..., T], *args) -> T:
    """
    Run a Sweeper operation on the worker thread behind a spinner.

    Operation-level errors are printed and turned into exit code 1.
    """
    with make_sweeper() as sweeper:
        with show_scanning_progress() as progress:
            progress.add_task(description, total=None)
            future = sweeper.submit(operation, sweeper, *args)
            try:
                return future.result()
            except DriveSweepError as e:
                progress.stop()
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(1)


def parse_path_options(values: list[str], option: str) -> dict[str, list[str]]:
    """Turn repeated ID=PATH options into a mapping."""
    mapping: dict[str, list[str]] = {}
    for value in values:
        category_id, sep, path = value.partition("=")
        if not sep or not category_id or not path:
            console.print(f"[red]Invalid {option} value '{value}' (expected ID=PATH)[/red]")
            raise typer.Exit(1)
        mapping.setdefault(category_id, []).append(path)
    return mapping


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"drivesweep version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed log output."),
) -> None:
    """drivesweep - find and reclaim wasted space on the system drive."""
    setup_logging("DEBUG" if verbose else load_settings().log_level)


@app.command()
def status(
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
) -> None:
    """Show system volume usage and hibernation state."""
    volume = run_operation("Reading volume...", Sweeper.get_volume_info)
    hibernation = run_operation("Reading hibernation state...", Sweeper.get_hibernation_info)

    if as_json:
        print_json({"volume": volume.to_wire(), "hibernation": hibernation.to_wire()})
        return

    show_volume_info(volume)
    show_hibernation(hibernation)


@app.command()
def hibernation(
    enable: Optional[bool] = typer.Option(
        None, "--on/--off", help="Turn hibernation on or off (requires administrator)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
) -> None:
    """Show or change the hibernation setting."""
    if enable is None:
        info = run_operation("Reading hibernation state...", Sweeper.get_hibernation_info)
    else:
        info = run_operation("Updating hibernation...", Sweeper.set_hibernation_enabled, enable)

    if as_json:
        print_json(info.to_wire())
    else:
        show_hibernation(info)


@app.command()
def scan(
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
) -> None:
    """Measure reclaimable space per category."""
    summaries = run_operation("Scanning categories...", Sweeper.scan_categories)

    if as_json:
        print_json([s.to_wire() for s in summaries])
        return

    show_categories(summaries)
    console.print("[dim]Run [bold]drivesweep items <id>[/bold] to see the files of a category[/dim]")


@app.command()
def items(
    category: str = typer.Argument(..., help="Category ID"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum items (up to 2000)."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
) -> None:
    """List the files of a category."""
    listing = run_operation("Listing items...", Sweeper.list_category_items, category, limit)

    if as_json:
        print_json(listing.to_wire())
    else:
        show_category_items(category, listing)


@app.command()
def clean(
    categories: Optional[list[str]] = typer.Argument(None, help="Category IDs to clean"),
    exclude: list[str] = typer.Option([], "--exclude", "-x", help="ID=PATH to keep."),
    include: list[str] = typer.Option([], "--include", "-i", help="ID=PATH to delete exclusively."),
    request_file: Optional[Path] = typer.Option(
        None, "--request", help="Read a JSON clean request from a file."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be cleaned."),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompts"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
) -> None:
    """Delete reclaimable files from the chosen categories."""
    if request_file is not None:
        try:
            request = CleanRequest.model_validate_json(request_file.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            console.print(f"[red]Invalid request file: {escape(str(e))}[/red]")
            raise typer.Exit(1)
    else:
        request = CleanRequest(
            ids=categories or [],
            excluded_paths=parse_path_options(exclude, "--exclude"),
            included_paths=parse_path_options(include, "--include"),
        )

    if not request.ids and not any(request.included_paths.values()):
        console.print("[red]Error: Specify category IDs or --include paths[/red]")
        console.print("  drivesweep clean temp_files browser_cache")
        console.print("  drivesweep clean --include temp_files=C:\\Windows\\Temp\\a.log")
        raise typer.Exit(1)

    known = get_category_ids()
    unknown = [cat_id for cat_id in [*request.ids, *request.included_paths] if cat_id not in known]
    if unknown:
        console.print(f"[red]Unknown category: {', '.join(unknown)}[/red]")
        console.print("\nAvailable categories:")
        for cat_id in known:
            console.print(f"  • {cat_id}")
        raise typer.Exit(1)

    selected = []
    if request.ids:
        summaries = run_operation("Scanning categories...", Sweeper.scan_categories)
        selected = [s for s in summaries if s.id in request.ids]
    for summary in selected:
        request.category_stats.setdefault(
            summary.id,
            CategoryStats(size_bytes=summary.size_bytes, file_count=summary.file_count),
        )

    if not as_json:
        show_cleanup_preview(selected, dry_run=dry_run)
    if dry_run:
        raise typer.Exit(0)

    if not yes:
        console.print()
        if not confirm_action("Proceed with cleanup? Deleted files cannot be recovered"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    result = run_operation("Cleaning...", Sweeper.clean_categories, request)
    if as_json:
        print_json(result.to_wire())
    else:
        show_cleanup_result(result)


@app.command()
def large(
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum results (up to 1000)."),
    min_size_mb: Optional[int] = typer.Option(None, "--min-size-mb", "-m", help="Size threshold in MB."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
) -> None:
    """Sweep the whole system volume for large files and cache/log/temp folders."""
    found = run_operation("Sweeping volume...", Sweeper.scan_large_items, limit, min_size_mb)

    if as_json:
        print_json([item.to_wire() for item in found])
    else:
        show_large_items(found)


@app.command(name="clean-large")
def clean_large(
    paths: list[str] = typer.Argument(..., help="Files or folders from the volume sweep"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompts"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
) -> None:
    """Delete specific files or folders found by `drivesweep large`."""
    if not yes:
        for path in paths:
            console.print(f"  • {path}")
        if not confirm_action(f"Permanently delete {len(paths)} item(s)?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    result = run_operation("Deleting...", Sweeper.clean_large_items, paths)
    if as_json:
        print_json(result.to_wire())
    else:
        show_cleanup_result(result)


@app.command()
def config(
    downloads_age: Optional[int] = typer.Option(
        None, "--downloads-age", help="Age in days before a download counts as old."
    ),
    large_limit: Optional[int] = typer.Option(None, "--large-limit", help="Default result cap for `large`."),
    min_size_mb: Optional[int] = typer.Option(None, "--min-size-mb", help="Default size threshold for `large`."),
    items_limit: Optional[int] = typer.Option(None, "--items-limit", help="Default cap for `items`."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level, e.g. INFO."),
) -> None:
    """Show saved settings, or update them with the options given."""
    settings = load_settings()
    updates = {
        "downloads_max_age_days": downloads_age,
        "large_items_limit": large_limit,
        "large_items_min_size_mb": min_size_mb,
        "category_items_limit": items_limit,
        "log_level": log_level.upper() if log_level else None,
    }
    updates = {key: value for key, value in updates.items() if value is not None}

    if updates:
        try:
            settings = Settings.model_validate({**settings.model_dump(), **updates})
        except ValidationError as e:
            console.print(f"[red]Invalid setting: {escape(str(e))}[/red]")
            raise typer.Exit(1)
        if not save_settings(settings):
            console.print(f"[red]Could not save settings to {get_config_path()}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]Saved settings to {get_config_path()}[/green]\n")

    show_settings(settings)


@app.command(name="list")
def list_categories() -> None:
    """List all cleanup categories."""
    max_age_days = load_settings().downloads_max_age_days
    console.print("[bold]Available Categories[/bold]\n")
    for row in CATEGORY_TABLE:
        console.print(f"  • [bold]{row.id}[/bold] - {row.title}")
        console.print(f"    [dim]{describe(row, max_age_days)}[/dim]")
    console.print()
    console.print("[dim]Run [bold]drivesweep scan[/bold] to measure each category[/dim]")


if __name__ == "__main__":
    app()
