"""Tests for executor adapters."""

import threading

import pytest


@pytest.mark.core
class TestSynchronousExecutor:
    """Tests for SynchronousExecutor."""

    def test_runs_in_calling_thread(self) -> None:
        """Tasks run immediately on the caller's thread."""
        from dashfeed.adapters.executor import SynchronousExecutor

        future = SynchronousExecutor().submit(threading.current_thread)

        assert future.done()
        assert future.result() is threading.current_thread()

    def test_exception_is_captured_in_future(self) -> None:
        """Exceptions are stored on the future, not raised by submit()."""
        from dashfeed.adapters.executor import SynchronousExecutor

        def boom() -> None:
            raise ValueError("bad")

        future = SynchronousExecutor().submit(boom)

        assert isinstance(future.exception(), ValueError)


@pytest.mark.core
class TestThreadPoolExecutorAdapter:
    """Tests for ThreadPoolExecutorAdapter."""

    def test_runs_on_named_worker_thread(self) -> None:
        """Workers carry the dashfeed-fetch prefix."""
        from dashfeed.adapters.executor import ThreadPoolExecutorAdapter

        executor = ThreadPoolExecutorAdapter(max_workers=1)
        name = executor.submit(lambda: threading.current_thread().name).result(timeout=5)
        executor.shutdown()

        assert name.startswith("dashfeed-fetch")

    def test_satisfies_port(self) -> None:
        """Both adapters implement ExecutorPort."""
        from dashfeed.adapters.executor import (
            SynchronousExecutor,
            ThreadPoolExecutorAdapter,
        )
        from dashfeed.core.ports import ExecutorPort

        pool = ThreadPoolExecutorAdapter(max_workers=1)
        assert isinstance(pool, ExecutorPort)
        assert isinstance(SynchronousExecutor(), ExecutorPort)
        pool.shutdown(wait=False, cancel_futures=True)
