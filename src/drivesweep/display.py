"""Rich terminal display for drivesweep."""

from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from drivesweep.config import Settings
from drivesweep.models import (
    CategoryItems,
    CategorySummary,
    CleanupResult,
    HibernationInfo,
    LargeItem,
    VolumeInfo,
)

console = Console()

MAX_FAILURES_SHOWN = 20


def format_size(size_bytes: int) -> str:
    """Format bytes to human-readable string (decimal units)."""
    if size_bytes >= 1000**3:
        return f"{size_bytes / (1000**3):.1f} GB"
    elif size_bytes >= 1000**2:
        return f"{size_bytes / (1000**2):.1f} MB"
    elif size_bytes >= 1000:
        return f"{size_bytes / 1000:.1f} KB"
    else:
        return f"{size_bytes} B"


def format_modified(modified_ms: int | None) -> str:
    if modified_ms is None:
        return "-"
    return datetime.fromtimestamp(modified_ms / 1000).strftime("%Y-%m-%d %H:%M")


def usage_color(used_percent: float) -> str:
    if used_percent >= 90:
        return "red"
    elif used_percent >= 75:
        return "yellow"
    return "green"


def show_volume_info(volume: VolumeInfo) -> None:
    """Display system volume usage."""
    color = usage_color(volume.used_percent)

    table = Table(title=f"Volume {volume.mount_point}", show_header=True, header_style="bold")
    table.add_column("Total", justify="right")
    table.add_column("Used", justify="right")
    table.add_column("Free", justify="right")
    table.add_column("Usage", justify="right")

    table.add_row(
        f"{volume.total_gb:.0f} GB",
        f"{volume.used_gb:.0f} GB",
        f"[bold]{volume.free_gb:.0f} GB[/bold]",
        f"[{color}]{volume.used_percent:.0f}%[/{color}]",
    )

    console.print(table)


def show_hibernation(info: HibernationInfo) -> None:
    """Display hibernation file state."""
    if info.enabled:
        console.print(f"Hibernation: [yellow]enabled[/yellow] ({format_size(info.size_bytes)})")
    else:
        console.print("Hibernation: [green]disabled[/green]")
    console.print(f"  File: {info.path}")


def show_categories(summaries: list[CategorySummary]) -> None:
    """Display category scan totals."""
    table = Table(title="Reclaimable Space", show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Category")
    table.add_column("Size", justify="right")
    table.add_column("Files", justify="right")
    table.add_column("Description", style="dim")

    total = 0
    for summary in summaries:
        table.add_row(
            summary.id,
            summary.title,
            format_size(summary.size_bytes),
            str(summary.file_count),
            summary.description,
        )
        total += summary.size_bytes

    console.print(table)
    console.print(f"[bold]Total reclaimable: {format_size(total)}[/bold]")


def show_category_items(category_id: str, listing: CategoryItems) -> None:
    """Display the files of one category."""
    table = Table(title=f"Items in {category_id}", show_header=True, header_style="bold")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Path")

    for item in listing.items:
        table.add_row(format_size(item.size_bytes), format_modified(item.modified_ms), item.path)

    console.print(table)
    if listing.has_more:
        console.print("[dim]More items exist; raise --limit to see them.[/dim]")


def show_large_items(items: list[LargeItem]) -> None:
    """Display results of the volume sweep."""
    if not items:
        console.print("[green]No large items found.[/green]")
        return

    table = Table(title="Large Items", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Size", justify="right")
    table.add_column("Type")
    table.add_column("Category")
    table.add_column("Path")

    for item in items:
        flag = "[yellow]![/yellow]" if item.suspicious else ""
        table.add_row(
            flag,
            format_size(item.size_bytes),
            "dir" if item.is_dir else "file",
            item.category_id or "",
            item.path,
        )

    console.print(table)
    console.print("[dim]! = name suggests cache, log or temporary data[/dim]")


def show_cleanup_preview(summaries: list[CategorySummary], dry_run: bool = False) -> None:
    """Display what a category cleanup would remove."""
    if dry_run:
        console.print("[yellow]DRY RUN - No files will be deleted[/yellow]\n")

    table = Table(title="Cleanup Preview", show_header=True, header_style="bold")
    table.add_column("Category")
    table.add_column("Size", justify="right")
    table.add_column("Files", justify="right")

    total = 0
    for summary in summaries:
        table.add_row(summary.title, format_size(summary.size_bytes), str(summary.file_count))
        total += summary.size_bytes

    console.print(table)
    console.print(f"\n[bold]Total to clean: {format_size(total)}[/bold]")


def show_cleanup_result(result: CleanupResult) -> None:
    """Display result of a cleanup operation."""
    console.print()
    if result.success:
        console.print("[bold green]Cleanup Complete![/bold green]")
    else:
        console.print("[bold yellow]Cleanup finished with errors[/bold yellow]")

    table = Table(show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Space freed", format_size(result.deleted_bytes))
    table.add_row("Files deleted", str(result.deleted_count))
    if result.failed:
        table.add_row("[red]Failed[/red]", str(len(result.failed)))
    console.print(table)

    if result.failed:
        lines = [f"[red]✗[/red] {error.path}: {error.message}" for error in result.failed[:MAX_FAILURES_SHOWN]]
        hidden = len(result.failed) - MAX_FAILURES_SHOWN
        if hidden > 0:
            lines.append(f"[dim]... and {hidden} more[/dim]")
        console.print(Panel("\n".join(lines), title="Failures", border_style="red"))


def show_settings(settings: Settings) -> None:
    """Display the effective settings."""
    table = Table(title="Settings", show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right")

    for name, value in settings.model_dump().items():
        table.add_row(name, str(value))

    console.print(table)


def show_scanning_progress() -> Progress:
    """Create a spinner for long-running operations."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def print_json(data) -> None:
    """Print a wire-format response."""
    console.print_json(data=data)


def confirm_action(message: str) -> bool:
    """Ask for confirmation."""
    from rich.prompt import Confirm

    return Confirm.ask(message)
