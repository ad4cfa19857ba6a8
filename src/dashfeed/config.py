"""Configuration utilities for dashfeed.

Settings come from environment variables (the CLI loads a ``.env`` file
first). Required values are not checked here: each component raises
ConfigurationError for the values it needs at the moment it needs them.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dashfeed.core.exceptions import ConfigurationError


DEFAULT_ACCOUNTS_DOMAIN = "accounts.zoho.com"
DEFAULT_ANALYTICS_DOMAIN = "analyticsapi.zoho.com"
DEFAULT_CACHE_TTL_MS = 5 * 60 * 1000
DEFAULT_POLL_INTERVAL_MS = 3000
DEFAULT_MAX_POLL_ATTEMPTS = 40
DEFAULT_FETCH_BUDGET_MS = 15 * 60 * 1000

VIEW_ENV_PREFIX = "ZOHO_VIEW_"
ENDPOINT_ENV_PREFIX = "DASHFEED_"
ENDPOINT_ENV_SUFFIX = "_CSV_URL"


def _int_setting(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}", setting=name
        ) from None


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings for both tiers.

    Attributes:
        client_id: OAuth client id.
        client_secret: OAuth client secret.
        refresh_token: Long-lived OAuth refresh token.
        accounts_domain: Host of the identity endpoint.
        analytics_domain: Host of the export API.
        org_id: Zoho organization id sent with every export request.
        workspace: Workspace id or name holding the views.
        view_ids: Environment variable name -> view id, for every ZOHO_VIEW_*.
        endpoints: Environment variable name -> URL, for every DASHFEED_*_CSV_URL.
        cache_ttl: Server dataset cache TTL in seconds.
        poll_interval: Seconds between export status checks.
        max_poll_attempts: Status checks before an export times out.
        fetch_budget: Client batch deadline in seconds.
    """

    client_id: str | None = None
    client_secret: str | None = None
    refresh_token: str | None = None
    accounts_domain: str = DEFAULT_ACCOUNTS_DOMAIN
    analytics_domain: str = DEFAULT_ANALYTICS_DOMAIN
    org_id: str | None = None
    workspace: str | None = None
    view_ids: dict[str, str] = field(default_factory=dict)
    endpoints: dict[str, str] = field(default_factory=dict)
    cache_ttl: float = DEFAULT_CACHE_TTL_MS / 1000
    poll_interval: float = DEFAULT_POLL_INTERVAL_MS / 1000
    max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS
    fetch_budget: float = DEFAULT_FETCH_BUDGET_MS / 1000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Raises:
            ConfigurationError: If a numeric variable is malformed.
        """
        env = os.environ if environ is None else environ

        view_ids = {
            name: value
            for name, value in env.items()
            if name.startswith(VIEW_ENV_PREFIX) and value
        }
        endpoints = {
            name: value
            for name, value in env.items()
            if name.startswith(ENDPOINT_ENV_PREFIX)
            and name.endswith(ENDPOINT_ENV_SUFFIX)
            and value
        }

        max_attempts = _int_setting(
            env, "ZOHO_EXPORT_MAX_ATTEMPTS", DEFAULT_MAX_POLL_ATTEMPTS
        )
        if max_attempts < 1:
            raise ConfigurationError(
                "ZOHO_EXPORT_MAX_ATTEMPTS must be at least 1",
                setting="ZOHO_EXPORT_MAX_ATTEMPTS",
            )

        return cls(
            client_id=env.get("ZOHO_CLIENT_ID") or None,
            client_secret=env.get("ZOHO_CLIENT_SECRET") or None,
            refresh_token=env.get("ZOHO_REFRESH_TOKEN") or None,
            accounts_domain=env.get("ZOHO_ACCOUNTS_DOMAIN") or DEFAULT_ACCOUNTS_DOMAIN,
            analytics_domain=env.get("ZOHO_ANALYTICS_DOMAIN")
            or DEFAULT_ANALYTICS_DOMAIN,
            org_id=env.get("ZOHO_ORG_ID") or None,
            workspace=env.get("ZOHO_WORKSPACE") or None,
            view_ids=view_ids,
            endpoints=endpoints,
            cache_ttl=_int_setting(env, "ZOHO_CACHE_TTL_MS", DEFAULT_CACHE_TTL_MS)
            / 1000,
            poll_interval=_int_setting(
                env, "ZOHO_EXPORT_POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS
            )
            / 1000,
            max_poll_attempts=max_attempts,
            fetch_budget=_int_setting(
                env, "DASHFEED_FETCH_BUDGET_MS", DEFAULT_FETCH_BUDGET_MS
            )
            / 1000,
        )

    def require(self, name: str) -> str:
        """Return a required credential/scope setting by environment name.

        Raises:
            ConfigurationError: If the value is missing.
        """
        attribute = _REQUIRED_SETTINGS.get(name)
        value = getattr(self, attribute) if attribute else self.view_ids.get(name)
        if not value:
            raise ConfigurationError(
                f"Missing required environment variable: {name}", setting=name
            )
        return value


_REQUIRED_SETTINGS = {
    "ZOHO_CLIENT_ID": "client_id",
    "ZOHO_CLIENT_SECRET": "client_secret",
    "ZOHO_REFRESH_TOKEN": "refresh_token",
    "ZOHO_ORG_ID": "org_id",
    "ZOHO_WORKSPACE": "workspace",
}


def find_project_root(start: Path | None = None) -> Path:
    """Find the project root directory by walking up from start directory.

    Searches for marker files in the following priority order:
    1. .dashfeed - Explicit project marker
    2. pyproject.toml - Python project root
    3. .git - Version control root

    Args:
        start: Directory to start searching from. If None, uses current directory.

    Returns:
        Path to project root directory. Returns start directory if no markers found.
    """
    if start is None:
        start = Path.cwd()

    markers = [".dashfeed", "pyproject.toml", ".git"]
    current = start.resolve()

    for parent in [current, *current.parents]:
        for marker in markers:
            if (parent / marker).exists():
                return parent

    return start.resolve()


def default_store_dir(root: Path | None = None) -> Path:
    """Directory holding persisted client payloads for a project."""
    return find_project_root(root) / ".dashfeed" / "store"
