"""Pytest configuration and shared fixtures.

This module registers custom markers for CI job separation and provides
shared fixtures for the test suite.
"""

from __future__ import annotations

import builtins
from collections.abc import Callable
from datetime import UTC, datetime

import httpx
import pytest

from dashfeed.config import Settings
from dashfeed.core.models import StoredPayload
from dashfeed.core.ports import PayloadStorePort


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "core: Core models, ports, and services")
    config.addinivalue_line("markers", "http: Zoho token and export adapters")
    config.addinivalue_line("markers", "cache: Dataset cache and payload store")
    config.addinivalue_line("markers", "client: Client-side tiered fetching")
    config.addinivalue_line("markers", "server: HTTP API endpoints")
    config.addinivalue_line("markers", "cli: CLI tests")
    config.addinivalue_line(
        "markers", "tra: Test Responsibility Anchor (TRA) - namespace.Anchor format"
    )
    config.addinivalue_line(
        "markers",
        "tier: Test tier for CI job separation (0=instant, 1=fast, 2=standard, 3=slow, 4=manual)",
    )


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """A clock that only moves when told to."""
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Fully configured settings with fast polling."""
    return Settings(
        client_id="client-id",
        client_secret="client-secret",
        refresh_token="refresh-token",
        org_id="org-1",
        workspace="ws-1",
        view_ids={
            "ZOHO_VIEW_BILLING": "view-billing",
            "ZOHO_VIEW_PIPELINE": "view-pipeline",
        },
        poll_interval=0.0,
        max_poll_attempts=5,
    )


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]:
    """Build an httpx.Client that routes every request to a handler."""

    def build(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler))

    return build


@pytest.fixture
def memory_store() -> PayloadStorePort:
    """In-memory payload store for client-tier tests."""

    class MemoryStore:
        def __init__(self) -> None:
            self.items: dict[str, StoredPayload] = {}

        def get(self, key: str) -> StoredPayload | None:
            return self.items.get(key)

        def put(
            self, key: str, payload: str, updated_at: datetime | None = None
        ) -> None:
            self.items[key] = StoredPayload(payload, updated_at or datetime.now(UTC))

        def invalidate(self, key: str) -> None:
            self.items.pop(key, None)

        def list_all_keys(self) -> builtins.list[str]:
            return sorted(self.items)

    return MemoryStore()
