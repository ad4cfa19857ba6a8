"""CLI for dashfeed."""

# Import commands to register them with the app
# These imports have side effects (registering commands with @app.command())
from dashfeed.cli.commands import list as _list_module  # noqa: F401
from dashfeed.cli.commands import status as _status_module  # noqa: F401
from dashfeed.cli.main import app, main


__all__ = ["app", "main"]
