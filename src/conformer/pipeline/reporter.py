"""
Console reporter for pipeline results.

Formats pipeline results using Rich for clear, colored output.
"""

from rich.console import Console
from rich.table import Table

from conformer.pipeline.runner import PipelineResult
from conformer.validation.models import RecordValidation
from conformer.warehouse.loader import LoadStats

# Rejected records shown per entity type; the JSON report has all of them
_SHOWN_REJECTIONS = 5


class ConsoleReporter:
    """Formats and displays pipeline results to the console."""

    def __init__(self, console: Console) -> None:
        """
        Initialize console reporter.

        Args:
            console: Rich Console instance for output.
        """
        self.console = console

    def print_result(self, result: PipelineResult) -> None:
        """Print quality counts, the load summary and rejected records."""
        self.print_quality(result)
        if result.load is not None:
            self.print_load(result.load)
        self._print_rejections(result.rejected)
        if result.error_report_path is not None:
            self.console.print()
            self.console.print(f"Error report: {result.error_report_path}")

    def print_quality(self, result: PipelineResult) -> None:
        """
        Print per-entity counts through dedup and the quality stages.

        Args:
            result: Pipeline result to display.
        """
        table = Table(title="Data Quality", show_header=True)
        table.add_column("Entity", style="cyan", no_wrap=True)
        table.add_column("Staged", justify="right")
        table.add_column("Duplicates", justify="right")
        table.add_column("Valid", justify="right")
        table.add_column("Corrected", justify="right")
        table.add_column("Clean", justify="right", style="green")
        table.add_column("Rejected", justify="right")

        for entity_type, stats in result.quality.items():
            dedup = result.dedup.get(entity_type)
            staged = dedup.original if dedup else stats.records
            removed = dedup.removed if dedup else 0
            rejected = (
                f"[red]{stats.rejected}[/red]" if stats.rejected else str(stats.rejected)
            )
            table.add_row(
                entity_type,
                str(staged),
                str(removed),
                str(stats.valid),
                str(stats.transformed),
                str(stats.clean),
                rejected,
            )

        self.console.print(table)
        self.console.print()
        self.console.print("[bold]Summary:[/bold]")
        self.console.print(f"  [green]Clean: {result.total_clean}[/green]")
        self.console.print(f"  [red]Rejected: {result.total_rejected}[/red]")

    def print_load(self, stats: LoadStats) -> None:
        """
        Print per-table load counts.

        Args:
            stats: Load outcome to display.
        """
        table = Table(title="Warehouse Load", show_header=True)
        table.add_column("Table", style="cyan", no_wrap=True)
        table.add_column("Kind", style="blue")
        table.add_column("Loaded", justify="right", style="green")
        table.add_column("Existing", justify="right", style="dim")
        table.add_column("FK skipped", justify="right")
        table.add_column("Rejected", justify="right")

        for load in stats.tables:
            table.add_row(
                load.table,
                load.kind,
                str(load.loaded),
                str(load.conflicts),
                f"[yellow]{load.skipped_fk}[/yellow]" if load.skipped_fk else "0",
                f"[red]{load.rejected}[/red]" if load.rejected else "0",
            )

        self.console.print()
        self.console.print(table)
        self.console.print(f"  Total loaded: {stats.total_loaded}")

    def print_counts(self, counts: dict[str, int]) -> None:
        """Print row counts of the warehouse tables."""
        table = Table(title="Warehouse Tables", show_header=True)
        table.add_column("Table", style="cyan", no_wrap=True)
        table.add_column("Rows", justify="right")
        for name, count in counts.items():
            table.add_row(name, str(count))
        self.console.print(table)

    def _print_rejections(self, rejected: dict[str, list[RecordValidation]]) -> None:
        """Print the first rejected records of each entity type."""
        if not any(rejected.values()):
            return

        self.console.print()
        self.console.print("[bold red]Rejected Records:[/bold red]")

        for entity_type, records in rejected.items():
            if not records:
                continue
            self.console.print()
            self.console.print(f"[bold]{entity_type}[/bold] ({len(records)}):")
            for item in records[:_SHOWN_REJECTIONS]:
                for error in item.result.errors:
                    self.console.print(
                        f"  {error.code.value} {error.field}: {error.message} "
                        f"[dim]({error.value!r})[/dim]"
                    )
            if len(records) > _SHOWN_REJECTIONS:
                self.console.print(
                    f"  [dim]... {len(records) - _SHOWN_REJECTIONS} more in the "
                    "error report[/dim]"
                )
