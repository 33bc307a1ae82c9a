# output.py - Display Functions
# =============================================================================

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..errors import ExportFailedError
from .models import ExportSummary, PartitionFile

console = Console()


def display_banner() -> None:
    """Displays the tool banner."""
    console.print(Panel.fit(
        "[bold]Index Archiver[/bold]\n"
        "Partitioned export of search indexes to JSON Lines",
        title="📦 Index Archiver",
        border_style="cyan"
    ))


def display_bounds(field_name: str, lower: str, upper: str) -> None:
    """Displays the bounds of the ordering field."""
    table = Table(title=f"📏 Bounds of {field_name}")
    table.add_column("Bound", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Lower Bound", lower)
    table.add_row("Upper Bound", upper)

    console.print(table)


def display_partitions(partition_file: PartitionFile) -> None:
    """Displays a partition plan."""
    last = len(partition_file.partitions) - 1

    table = Table(
        title=f"🧩 Partitions of {partition_file.index_name} by {partition_file.field_name}",
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("Lower Bound", style="cyan")
    table.add_column("Upper Bound", style="cyan")
    table.add_column("Documents", justify="right", style="green")

    for partition in partition_file.partitions:
        closing = "]" if partition.index == last else ")"
        table.add_row(
            str(partition.index),
            escape(f"[{partition.lower_bound}"),
            escape(f"{partition.upper_bound}{closing}"),
            f"{partition.document_count:,}"
        )

    console.print(table)
    console.print(
        f"\n[bold]Total:[/bold] {len(partition_file.partitions)} partitions, "
        f"{partition_file.total_document_count:,} documents"
    )


def display_export_summary(summary: ExportSummary) -> None:
    """Displays the outcome of an export run."""
    failed = len(summary.failed_partitions)
    border = "red" if failed else "green"

    console.print(Panel.fit(
        f"[bold]Index:[/bold] {summary.index_name}\n"
        f"[green]✓ Exported:[/green] {len(summary.results)} partitions | "
        f"[red]✗ Failed:[/red] {failed}\n"
        f"[bold]Documents:[/bold] {summary.total_documents:,}\n"
        f"[bold]Time:[/bold] {summary.elapsed_seconds:.2f}s",
        title="📊 Export Summary",
        border_style=border
    ))


def display_export_failures(error: ExportFailedError) -> None:
    """Lists every partition that failed in an export run."""
    if error.summary is not None:
        display_export_summary(error.summary)

    table = Table(title="❌ Failed Partitions", show_lines=True)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Error", style="red")

    for failure in error.failures:
        table.add_row(str(failure.index), str(failure.cause)[:200])

    console.print(table)
