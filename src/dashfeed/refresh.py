"""Periodic re-fetch of all client sources for a long-lived dashboard session."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from dashfeed.core.csv_records import parse_records


if TYPE_CHECKING:
    from dashfeed.core.fallback import ResilientClientFetcher
    from dashfeed.core.models import DatasetRecord, FallbackDisclosure


logger = logging.getLogger(__name__)

REFRESH_INTERVAL = 15 * 60.0

Parser = Callable[[str], "list[DatasetRecord]"]


@dataclass(frozen=True, slots=True)
class DashboardState:
    """What the UI renders: parsed rows plus degraded-mode disclosure.

    ``data`` stays None until the first batch completes. A non-empty
    ``disclosures`` list means the dashboard is showing offline data and
    ``offline_notice`` carries the banner text.
    """

    data: dict[str, list[DatasetRecord]] | None = None
    loading: bool = True
    error: Exception | None = None
    disclosures: list[FallbackDisclosure] = field(default_factory=list)
    offline_notice: str | None = None
    last_updated: datetime | None = None


class DashboardRefresher:
    """Re-runs the client batch on a fixed interval until stopped.

    The refresher accepts updates from construction, so ``refresh()`` also
    works on its own. After ``stop()`` no state update happens, even if a
    batch that was already running finishes later.
    """

    def __init__(
        self,
        fetcher: ResilientClientFetcher,
        *,
        interval: float = REFRESH_INTERVAL,
        parse: Parser = parse_records,
        on_update: Callable[[DashboardState], None] | None = None,
    ) -> None:
        self._fetcher = fetcher
        self.interval = interval
        self._parse = parse
        self._on_update = on_update
        self._state = DashboardState()
        self._lock = threading.Lock()
        self._alive = True
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def state(self) -> DashboardState:
        """Latest state snapshot."""
        with self._lock:
            return self._state

    @property
    def alive(self) -> bool:
        """Whether the refresher accepts state updates."""
        return self._alive

    def _update(self, compute: Callable[[DashboardState], DashboardState]) -> bool:
        with self._lock:
            if not self._alive:
                return False
            self._state = compute(self._state)
            state = self._state
        if self._on_update is not None:
            self._on_update(state)
        return True

    def refresh(self) -> DashboardState:
        """Run one batch now and store the result.

        Returns:
            The state after the batch (unchanged if stopped meanwhile).
        """
        self._update(lambda prev: replace(prev, loading=True, error=None))

        try:
            result = self._fetcher.fetch_all()
            data = {key: self._parse(payload) for key, payload in result.datasets.items()}
        except Exception as e:
            logger.exception("Dashboard refresh failed")
            self._update(lambda prev: replace(prev, loading=False, error=e))
            return self.state

        if result.degraded:
            logger.warning(
                "Dashboard running in offline mode for: %s",
                ", ".join(d.source_label for d in result.disclosures),
            )
        self._update(
            lambda _prev: DashboardState(
                data=data,
                loading=False,
                error=None,
                disclosures=list(result.disclosures),
                offline_notice=result.offline_notice,
                last_updated=datetime.now(UTC),
            )
        )
        return self.state

    def start(self) -> None:
        """Refresh immediately, then every ``interval`` seconds, on a daemon thread."""
        with self._lock:
            if self._thread is not None:
                return
            self._alive = True
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="dashfeed-refresh", daemon=True
        )
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.is_set():
            self.refresh()
            if self._stop.wait(self.interval):
                break

    def stop(self, timeout: float | None = None) -> None:
        """Stop refreshing. Later batch results are discarded."""
        with self._lock:
            self._alive = False
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def __enter__(self) -> DashboardRefresher:
        self.start()
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.stop()
