"""List command for CLI."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from dashfeed.cli.main import app, load_settings
from dashfeed.sources import DEFAULT_VIEWS, configured_sources


@app.command(name="list")
def list_datasets() -> None:
    """List datasets with their Zoho view and client endpoint configuration.

    Views are read from ZOHO_VIEW_* variables and endpoints from
    DASHFEED_<NAME>_CSV_URL.
    """
    settings = load_settings()
    views = {view.key: view for view in DEFAULT_VIEWS}

    table = Table()
    table.add_column("Name")
    table.add_column("Label")
    table.add_column("View")
    table.add_column("Endpoint")

    for source in configured_sources(settings):
        view = views.get(source.key)
        if view is None:
            view_cell = "-"
        elif view.view_env in settings.view_ids:
            view_cell = settings.view_ids[view.view_env]
        else:
            view_cell = "unset"
        endpoint_cell = source.endpoint or "unset"
        table.add_row(source.key, source.label, view_cell, endpoint_cell)

    # Force terminal output to ensure tables render correctly in all environments
    console = Console(force_terminal=True)
    console.print(table)
