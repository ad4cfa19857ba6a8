"""In-process TTL cache for exported dataset payloads."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Generic, TypeVar

from dashfeed.core.models import CacheEntry


if TYPE_CHECKING:
    from dashfeed.core.ports import Clock


T = TypeVar("T")

DEFAULT_TTL = 5 * 60.0


class ProcessDatasetCache(Generic[T]):
    """Short-lived cache of dataset payloads shared by every request in a process.

    Entries are keyed by logical dataset name. The key space is the fixed set
    of registered datasets, so there is no eviction beyond per-key expiry.
    Loader failures are never cached: the next lookup simply loads again.

    The lock guards slot reads and writes only. Loaders run outside it, so a
    slow export for one dataset never blocks lookups of another.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, *, clock: Clock = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, CacheEntry[T]] | None = None

    def _slots(self) -> dict[str, CacheEntry[T]]:
        # Caller holds the lock.
        if self._entries is None:
            self._entries = {}
        return self._entries

    def get(self, key: str) -> T | None:
        """Return the live value for key, or None if absent or expired."""
        with self._lock:
            entry = self._slots().get(key)
            if entry is not None and entry.is_live(self._clock()):
                return entry.value
        return None

    def put(self, key: str, value: T) -> None:
        """Store value for key with a fresh TTL."""
        with self._lock:
            self._slots()[key] = CacheEntry(value=value, expires_at=self._clock() + self.ttl)

    def get_dataset(self, key: str, loader: Callable[[], T]) -> T:
        """Return the cached payload for key, loading it on a miss.

        Args:
            key: Logical dataset name.
            loader: Produces the payload; called only on a miss or expiry.

        Returns:
            The cached or freshly loaded payload.

        Raises:
            Exception: Whatever the loader raises, with nothing cached.
        """
        with self._lock:
            entry = self._slots().get(key)
            if entry is not None and entry.is_live(self._clock()):
                return entry.value

        value = loader()
        self.put(key, value)
        return value

    def invalidate(self, key: str) -> None:
        """Drop one entry."""
        with self._lock:
            self._slots().pop(key, None)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._slots().clear()

    def keys(self) -> list[str]:
        """Keys with a live entry."""
        with self._lock:
            now = self._clock()
            return [key for key, entry in self._slots().items() if entry.is_live(now)]
