"""Tiered client-side fetching: network, then stored copy, then bundled snapshot.

Every source is resolved by walking an ordered list of tiers. A tier either
returns a payload or ``Unavailable(reason)``; the first payload wins and the
last reason seen becomes the source's disclosure. Nothing here raises to the
caller: failures only ever demote a source to a weaker tier.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import wait
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from dashfeed.core.exceptions import SourceFetchError, StoreCorruptError
from dashfeed.core.models import (
    DataTier,
    FallbackDisclosure,
    FallbackReason,
    FetchAllResult,
    SourceResult,
)
from dashfeed.core.ports import always_online


if TYPE_CHECKING:
    from dashfeed.config import Settings
    from dashfeed.core.models import DataSource
    from dashfeed.core.ports import (
        Clock,
        ConnectivityCheck,
        ExecutorPort,
        PayloadFetcherPort,
        PayloadStorePort,
    )


logger = logging.getLogger(__name__)

DEFAULT_FETCH_BUDGET = 15 * 60.0

SnapshotLoader = Callable[[str], "str | None"]
ExecutorFactory = Callable[[int], "ExecutorPort"]


@dataclass(frozen=True, slots=True)
class Unavailable:
    """A tier had nothing to offer; ``reason`` is disclosed if set."""

    reason: FallbackReason | None = None


class Deadline:
    """A batch-wide time budget that can also be cancelled early."""

    def __init__(self, budget: float, *, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self._expires_at = clock() + budget
        self._cancelled = threading.Event()

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        """True once cancelled or out of time."""
        return self._cancelled.is_set() or self.remaining() <= 0

    def cancel(self) -> None:
        """Expire the deadline now."""
        self._cancelled.set()


class FallbackTier(Protocol):
    """One step of the fallback chain."""

    tier: DataTier

    def load(self, source: DataSource) -> str | Unavailable:
        """Return the payload for source, or Unavailable."""
        ...


class NetworkTier:
    """Fetches from the source endpoint and persists what it gets."""

    tier = DataTier.NETWORK

    def __init__(
        self,
        fetcher: PayloadFetcherPort,
        store: PayloadStorePort,
        deadline: Deadline,
        connectivity: ConnectivityCheck = always_online,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._deadline = deadline
        self._connectivity = connectivity

    def load(self, source: DataSource) -> str | Unavailable:
        if not source.endpoint:
            return Unavailable(FallbackReason.MISSING_ENDPOINT)
        if not self._connectivity():
            return Unavailable(FallbackReason.OFFLINE)
        if self._deadline.expired:
            return Unavailable(FallbackReason.NETWORK_FAILURE)

        try:
            payload = self._fetcher.fetch(
                source.endpoint, timeout=self._deadline.remaining()
            )
        except SourceFetchError as e:
            logger.warning("Network fetch failed for %s: %s", source.label, e)
            return Unavailable(FallbackReason.NETWORK_FAILURE)

        # A result landing after the batch gave up must not touch the store.
        if self._deadline.expired:
            logger.warning("Discarding late network result for %s", source.label)
            return Unavailable(FallbackReason.NETWORK_FAILURE)

        try:
            self._store.put(source.storage_key, payload)
        except OSError as e:
            logger.warning("Unable to persist %s payload: %s", source.label, e)
        return payload


class PersistedTier:
    """Serves the last good payload from durable client storage."""

    tier = DataTier.PERSISTED

    def __init__(self, store: PayloadStorePort) -> None:
        self._store = store

    def load(self, source: DataSource) -> str | Unavailable:
        try:
            stored = self._store.get(source.storage_key)
        except (StoreCorruptError, OSError) as e:
            logger.warning("Unable to read stored %s payload: %s", source.label, e)
            return Unavailable()
        if stored is None or not stored.payload:
            return Unavailable()
        return stored.payload


class SnapshotTier:
    """Serves the snapshot bundled with the package."""

    tier = DataTier.SNAPSHOT

    def __init__(self, loader: SnapshotLoader | None = None) -> None:
        if loader is None:
            from dashfeed.snapshots import load_snapshot

            loader = load_snapshot
        self._loader = loader

    def load(self, source: DataSource) -> str | Unavailable:
        payload = self._loader(source.snapshot)
        if payload is None:
            return Unavailable()
        return payload


def resolve_source(
    source: DataSource,
    tiers: Sequence[FallbackTier],
    reason: FallbackReason | None = None,
) -> SourceResult:
    """Walk tiers in order and return the first payload found.

    Args:
        source: Source to resolve.
        tiers: Tiers to try, strongest first.
        reason: Degradation already known before the first tier runs.

    Returns:
        SourceResult whose disclosure carries the last reason recorded. When
        no tier has data, tier is None and payload is empty.
    """
    disclosure = FallbackDisclosure(source.label, reason) if reason else None
    for tier in tiers:
        try:
            outcome = tier.load(source)
        except Exception:
            logger.exception(
                "The %s tier failed unexpectedly for %s", tier.tier, source.label
            )
            outcome = Unavailable(
                FallbackReason.NETWORK_FAILURE if tier.tier is DataTier.NETWORK else None
            )
        if isinstance(outcome, Unavailable):
            if outcome.reason is not None:
                disclosure = FallbackDisclosure(source.label, outcome.reason)
            continue
        return SourceResult(source.key, outcome, tier.tier, disclosure)

    logger.error("No data available at all for %s", source.label)
    return SourceResult(source.key, "", None, disclosure)


def _thread_pool(max_workers: int) -> ExecutorPort:
    from dashfeed.adapters.executor import ThreadPoolExecutorAdapter

    return ThreadPoolExecutorAdapter(max_workers=max_workers)


class ResilientClientFetcher:
    """Fetches every source concurrently under one shared deadline.

    ``fetch_all`` never raises for data-source problems. A source whose
    network attempt is still running when the deadline fires is resolved
    from the stored and bundled tiers exactly as if the network had failed.

    Example:
        >>> fetcher = ResilientClientFetcher.from_settings(Settings.from_env())
        >>> result = fetcher.fetch_all()
        >>> if result.degraded:
        ...     print(result.offline_notice, [d.source_label for d in result.disclosures])
    """

    def __init__(
        self,
        sources: Sequence[DataSource],
        store: PayloadStorePort,
        fetcher: PayloadFetcherPort,
        *,
        connectivity: ConnectivityCheck = always_online,
        budget: float = DEFAULT_FETCH_BUDGET,
        executor_factory: ExecutorFactory = _thread_pool,
        snapshot_loader: SnapshotLoader | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        keys = [source.key for source in sources]
        if len(set(keys)) != len(keys):
            raise ValueError("Source keys must be unique")
        self._sources = list(sources)
        self._store = store
        self._fetcher = fetcher
        self._connectivity = connectivity
        self.budget = budget
        self._executor_factory = executor_factory
        self._snapshot_tier = SnapshotTier(snapshot_loader)
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store_dir: Path | None = None,
        *,
        connectivity: ConnectivityCheck = always_online,
    ) -> ResilientClientFetcher:
        """Create a fetcher for the default sources with default adapters.

        Args:
            settings: Supplies source endpoints and the fetch budget.
            store_dir: Directory for stored copies; defaults to the project's
                ``.dashfeed/store``.
            connectivity: Offline probe.
        """
        from dashfeed.adapters.cache import FilePayloadStore
        from dashfeed.adapters.network import HttpPayloadFetcher
        from dashfeed.config import default_store_dir
        from dashfeed.sources import configured_sources

        return cls(
            sources=configured_sources(settings),
            store=FilePayloadStore(store_dir or default_store_dir()),
            fetcher=HttpPayloadFetcher(),
            connectivity=connectivity,
            budget=settings.fetch_budget,
        )

    @property
    def sources(self) -> list[DataSource]:
        """Configured sources, in result order."""
        return list(self._sources)

    def fetch_all(self) -> FetchAllResult:
        """Resolve every source and aggregate payloads and disclosures."""
        if not self._sources:
            return FetchAllResult()

        deadline = Deadline(self.budget, clock=self._clock)
        fallbacks: list[FallbackTier] = [PersistedTier(self._store), self._snapshot_tier]
        tiers: list[FallbackTier] = [
            NetworkTier(self._fetcher, self._store, deadline, self._connectivity),
            *fallbacks,
        ]

        executor = self._executor_factory(len(self._sources))
        futures = {
            source.key: executor.submit(resolve_source, source, tiers)
            for source in self._sources
        }
        done, pending = wait(futures.values(), timeout=deadline.remaining())
        if pending:
            deadline.cancel()
            logger.warning(
                "Fetch budget of %.0fs exhausted with %d source(s) in flight",
                self.budget,
                len(pending),
            )
        executor.shutdown(wait=False, cancel_futures=True)

        results: list[SourceResult] = []
        for source in self._sources:
            future = futures[source.key]
            if future in done and future.exception() is None:
                result = future.result()
            else:
                if future in done:
                    logger.error(
                        "Fetching %s failed unexpectedly",
                        source.label,
                        exc_info=future.exception(),
                    )
                result = resolve_source(
                    source, fallbacks, reason=FallbackReason.NETWORK_FAILURE
                )
            results.append(result)

        return _aggregate(results)


def _aggregate(results: Sequence[SourceResult]) -> FetchAllResult:
    aggregated = FetchAllResult()
    for result in results:
        aggregated.datasets[result.key] = result.payload
        if result.tier is None:
            aggregated.unavailable.append(result.key)
        else:
            aggregated.tiers[result.key] = result.tier
        if result.disclosure is not None:
            aggregated.disclosures.append(result.disclosure)
    return aggregated
