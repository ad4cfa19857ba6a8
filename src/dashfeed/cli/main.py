"""CLI commands for dashfeed."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from dashfeed.core.exceptions import ConfigurationError


if TYPE_CHECKING:
    from dashfeed.config import Settings


app = typer.Typer(
    name="dashfeed",
    help="Resilient dataset sync for Zoho Analytics dashboards.",
    no_args_is_help=True,
)


def configure_logging(level: int = logging.WARNING) -> None:
    """Route library logging through Rich on stderr."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                show_path=False,
                rich_tracebacks=True,
            )
        ],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def load_settings() -> Settings:
    """Load settings from the environment (and a .env file, if any).

    Raises:
        typer.Exit: If a setting is malformed.
    """
    from dashfeed.config import Settings

    load_dotenv(find_dotenv(usecwd=True))
    try:
        return Settings.from_env()
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        if e.recovery_hint:
            typer.echo(f"Hint: {e.recovery_hint}", err=True)
        raise typer.Exit(1) from None


@app.callback()
def _root(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging (token refreshes, export job polling).",
    ),
) -> None:
    """Resilient dataset sync for Zoho Analytics dashboards."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING)


@app.command()
def fetch(
    offline: bool = typer.Option(
        False,
        "--offline",
        help="Skip the network as if the client had no connectivity.",
    ),
    store_dir: Path | None = typer.Option(
        None,
        "--store-dir",
        help="Directory of stored copies. Defaults to <project>/.dashfeed/store.",
    ),
    budget: float | None = typer.Option(
        None,
        "--budget",
        help="Seconds allowed for the whole batch (default DASHFEED_FETCH_BUDGET_MS).",
    ),
) -> None:
    """Fetch every source, falling back to stored or bundled copies."""
    from dashfeed.cli.formatting import _format_tier_with_color
    from dashfeed.core.csv_records import parse_records
    from dashfeed.core.fallback import ResilientClientFetcher
    from dashfeed.core.ports import always_online

    settings = load_settings()
    fetcher = ResilientClientFetcher.from_settings(
        settings,
        store_dir,
        connectivity=(lambda: False) if offline else always_online,
    )
    if budget is not None:
        fetcher.budget = budget

    result = fetcher.fetch_all()
    notices = {d.source_label: d.reason.value for d in result.disclosures}

    table = Table()
    table.add_column("Source")
    table.add_column("Tier")
    table.add_column("Rows", justify="right")
    table.add_column("Notice")

    for source in fetcher.sources:
        tier = result.tiers.get(source.key)
        rows = len(parse_records(result.datasets.get(source.key, "")))
        table.add_row(
            source.label,
            _format_tier_with_color(tier.value if tier else "unavailable"),
            str(rows),
            notices.get(source.label, ""),
        )

    console = Console(force_terminal=True)
    console.print(table)

    if result.offline_notice:
        typer.echo(result.offline_notice)


@app.command()
def export(
    name: str = typer.Argument(..., help="Dataset key, e.g. 'billing'."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the CSV here instead of stdout.",
    ),
) -> None:
    """Export one dataset from Zoho Analytics."""
    from dashfeed.core.exceptions import DashfeedError, DatasetNotFoundError
    from dashfeed.core.services import DatasetService

    settings = load_settings()
    service = DatasetService.from_settings(settings)

    try:
        csv_text = service.get_dataset_csv(name)
    except DatasetNotFoundError as e:
        typer.echo(f"Dataset '{name}' not found.")
        if e.recovery_hint:
            typer.echo(f"Hint: {e.recovery_hint}")
        raise typer.Exit(1) from None
    except DashfeedError as e:
        typer.echo(f"Error: {e}", err=True)
        if e.recovery_hint:
            typer.echo(f"Hint: {e.recovery_hint}", err=True)
        raise typer.Exit(1) from None

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(csv_text, encoding="utf-8")
        typer.echo(f"{name}: {output}")
    else:
        typer.echo(csv_text, nl=False)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind."),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on."),
) -> None:
    """Serve the dataset CSV endpoints."""
    import uvicorn

    from dashfeed.server import create_app

    settings = load_settings()
    uvicorn.run(create_app(settings=settings), host=host, port=port)


def main() -> None:
    """Entry point for the CLI."""
    app()
