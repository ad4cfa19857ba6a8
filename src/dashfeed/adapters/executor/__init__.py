"""Executor adapters for parallel execution."""

from dashfeed.adapters.executor.executor import (
    SynchronousExecutor,
    ThreadPoolExecutorAdapter,
)


__all__ = ["SynchronousExecutor", "ThreadPoolExecutorAdapter"]
