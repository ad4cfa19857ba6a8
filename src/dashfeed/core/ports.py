"""Port interfaces for hexagonal architecture.

Ports define contracts that adapters must implement. The core domain
depends only on these protocols, never on concrete implementations.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    import builtins
    from concurrent.futures import Future
    from datetime import datetime

    from dashfeed.core.models import Credential, StoredPayload

Clock = Callable[[], float]
"""Monotonic clock returning seconds."""

ConnectivityCheck = Callable[[], bool]
"""Returns False when the client is known to be offline."""


def always_online() -> bool:
    """Default connectivity check: assume the network is reachable."""
    return True


@runtime_checkable
class TokenProvider(Protocol):
    """Source of bearer credentials for the analytics service."""

    def get_token(self) -> Credential:
        """Return a credential that is valid right now."""
        ...


@runtime_checkable
class ExporterPort(Protocol):
    """Exports one remote view as raw payload text."""

    def export_dataset(self, resource_id: str) -> str:
        """Export a view and return its payload verbatim.

        Raises:
            ExportError: On any terminal export failure.
        """
        ...


@runtime_checkable
class PayloadFetcherPort(Protocol):
    """Client-side network access to a source endpoint."""

    def fetch(self, url: str, timeout: float) -> str:
        """Fetch a payload.

        Args:
            url: Endpoint to request.
            timeout: Seconds the request may take at most.

        Raises:
            SourceFetchError: On transport failure or non-success status.
        """
        ...


@runtime_checkable
class PayloadStorePort(Protocol):
    """Durable client-side storage of last good payloads."""

    def get(self, key: str) -> StoredPayload | None:
        """Return the stored payload, or None if nothing is stored."""
        ...

    def put(self, key: str, payload: str, updated_at: datetime | None = None) -> None:
        """Store a payload with its update timestamp (defaults to now)."""
        ...

    def invalidate(self, key: str) -> None:
        """Remove a stored payload."""
        ...

    def list_all_keys(self) -> builtins.list[str]:
        """List all keys currently stored."""
        ...


@runtime_checkable
class ExecutorPort(Protocol):
    """Executor for parallel task execution.

    Abstracts over concurrent.futures executors to allow dependency injection
    and testing. The core domain uses this protocol instead of directly
    importing ThreadPoolExecutor, maintaining "concurrency at the edges".
    """

    def submit(
        self, fn: Callable[..., object], *args: object, **kwargs: object
    ) -> Future[object]:  # type: ignore[name-defined, unused-ignore]
        """Submit a function for execution."""
        ...

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        """Release workers, optionally without waiting for running tasks."""
        ...
