"""Status command for CLI."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from dashfeed.cli.formatting import _format_status_with_color
from dashfeed.cli.main import app, load_settings
from dashfeed.core.exceptions import StoreCorruptError


@app.command()
def status(
    store_dir: Path | None = typer.Option(
        None,
        "--store-dir",
        help="Directory of stored copies. Defaults to <project>/.dashfeed/store.",
    ),
) -> None:
    """Show the stored copy state (fresh/stale/missing) per source."""
    from dashfeed.adapters.cache import FilePayloadStore
    from dashfeed.config import default_store_dir
    from dashfeed.core.formatting import stored_state
    from dashfeed.refresh import REFRESH_INTERVAL
    from dashfeed.sources import configured_sources

    settings = load_settings()
    store = FilePayloadStore(store_dir or default_store_dir())
    now = datetime.now(UTC)
    max_age = timedelta(seconds=REFRESH_INTERVAL)

    table = Table()
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Updated")

    for source in configured_sources(settings):
        try:
            stored = store.get(source.storage_key)
        except StoreCorruptError as e:
            typer.echo(f"Warning: {e}", err=True)
            if e.recovery_hint:
                typer.echo(f"Hint: {e.recovery_hint}", err=True)
            stored = None

        updated_at = stored.updated_at if stored is not None else None
        state = stored_state(updated_at, now, max_age)
        table.add_row(
            source.key,
            _format_status_with_color(state),
            updated_at.isoformat(timespec="seconds") if updated_at else "-",
        )

    console = Console(force_terminal=True)
    console.print(table)
