"""Command-line interface for the conformer pipeline."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.markup import escape

from conformer.exceptions import ConformerError

if TYPE_CHECKING:
    from conformer.config.settings import PipelineConfig

app = typer.Typer(
    name="conformer",
    help="Conform customer data from several sources into a warehouse.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]
LogLevelOption = Annotated[
    str,
    typer.Option("--log-level", help="Log level for the run log."),
]


def _load(config: Path, log_level: str = "INFO") -> "PipelineConfig":
    """Load configuration and send logs to the project's run log."""
    from conformer.config.loader import load_config
    from conformer.utils.logging import configure_logging

    console.print(f"[blue]Loading configuration from {config}[/blue]")
    try:
        pipeline_config = load_config(config)
    except ConformerError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    configure_logging(level=log_level, log_file=pipeline_config.log_path)
    console.print(f"[dim]Run log: {pipeline_config.log_path}[/dim]")
    return pipeline_config


@app.command()
def run(
    config: ConfigOption,
    load: Annotated[
        bool,
        typer.Option("--load/--no-load", help="Load clean records into the warehouse."),
    ] = True,
    log_level: LogLevelOption = "INFO",
) -> None:
    """Run the full pipeline: dedup, validate, correct, re-validate and load."""
    from conformer.pipeline import run_pipeline
    from conformer.pipeline.reporter import ConsoleReporter

    pipeline_config = _load(config, log_level)
    console.print(f"[blue]Running pipeline for {pipeline_config.project}[/blue]")

    try:
        result = run_pipeline(pipeline_config, load=load)
    except ConformerError as e:
        console.print(f"[red]Pipeline failed: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    ConsoleReporter(console).print_result(result)


@app.command()
def validate(
    config: ConfigOption,
    log_level: LogLevelOption = "INFO",
) -> None:
    """Check staged data without loading; exits non-zero if records are rejected."""
    from conformer.pipeline import run_pipeline
    from conformer.pipeline.reporter import ConsoleReporter

    pipeline_config = _load(config, log_level)
    console.print("[blue]Validating staged data...[/blue]")

    try:
        result = run_pipeline(pipeline_config, load=False)
    except ConformerError as e:
        console.print(f"[red]Validation failed: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    ConsoleReporter(console).print_result(result)

    if result.total_rejected:
        raise typer.Exit(code=1)


@app.command("init-warehouse")
def init_warehouse(
    config: ConfigOption,
    reset: Annotated[
        bool,
        typer.Option("--reset", help="Drop all warehouse tables first."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask before dropping tables."),
    ] = False,
) -> None:
    """Create the warehouse schema (idempotent)."""
    from conformer.warehouse import WarehouseLoader

    pipeline_config = _load(config)

    if reset and not yes:
        typer.confirm(
            f"Drop every warehouse table at {pipeline_config.warehouse.url}?",
            abort=True,
        )

    try:
        with WarehouseLoader(pipeline_config.warehouse) as loader:
            if reset:
                loader.reset()
            else:
                loader.initialize()
    except ConformerError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    console.print("[green]Warehouse schema ready[/green]")


@app.command("warehouse-stats")
def warehouse_stats(config: ConfigOption) -> None:
    """Show row counts of every warehouse table."""
    from conformer.pipeline.reporter import ConsoleReporter
    from conformer.warehouse import WarehouseLoader

    pipeline_config = _load(config)

    try:
        with WarehouseLoader(pipeline_config.warehouse) as loader:
            counts = loader.table_counts()
    except ConformerError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    ConsoleReporter(console).print_counts(counts)


@app.command()
def version() -> None:
    """Show version information."""
    from conformer import __version__

    console.print(f"conformer version {__version__}")


if __name__ == "__main__":
    app()
