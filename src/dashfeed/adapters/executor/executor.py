"""Executor adapters implementing ExecutorPort."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Callable


class SynchronousExecutor:
    """Runs tasks immediately in the calling thread.

    Deterministic stand-in for a pool, used by tests and single-source runs.
    Because every future is already done when submit() returns, a shared
    deadline can never interrupt a task run here.
    """

    def submit(
        self,
        fn: Callable[..., object],
        *args: object,
        **kwargs: object,
    ) -> Future[object]:
        """Execute function immediately and return completed future."""
        future: Future[object] = Future()
        try:
            result = fn(*args, **kwargs)
            future.set_result(result)
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        """Nothing to release."""
        _ = (wait, cancel_futures)


class ThreadPoolExecutorAdapter:
    """Adapter wrapping ThreadPoolExecutor to implement ExecutorPort.

    Worker threads are named ``dashfeed-fetch`` so they are easy to spot in
    thread dumps while a batch is stuck on a slow source.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        """Initialize thread pool executor adapter.

        Args:
            max_workers: Maximum number of worker threads. None uses default.
        """
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="dashfeed-fetch"
        )

    def submit(
        self,
        fn: Callable[..., object],
        *args: object,
        **kwargs: object,
    ) -> Future[object]:
        """Submit function to thread pool."""
        return self._executor.submit(fn, *args, **kwargs)

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        """Shut the pool down.

        Args:
            wait: Block until running tasks finish.
            cancel_futures: Drop tasks that have not started yet.
        """
        self._executor.shutdown(wait=wait, cancel_futures=cancel_futures)
