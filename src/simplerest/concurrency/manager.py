"""Thread pool manager for blocking calls in async contexts."""

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")


class ConcurrencyManager:
    """
    Manages a ThreadPoolExecutor for blocking work in async contexts.

    Transport calls and file I/O run here so the event loop stays free.

    Example:
        async with ConcurrencyManager(max_workers=4) as manager:
            response = await manager.run_blocking(builder.get_response, Post)
    """

    def __init__(self, max_workers: int = 4) -> None:
        """
        Initialize the concurrency manager.

        Args:
            max_workers: Number of thread pool workers. Defaults to 4.
        """
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def executor(self) -> ThreadPoolExecutor:
        """Get or create the thread pool executor."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="simplerest-io-",
            )
        return self._executor

    async def run_blocking(
        self,
        func: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """
        Run a blocking function in the thread pool.

        Cancelling the awaiting task does not interrupt the call already
        running in the worker; its result is discarded.

        Args:
            func: The function to execute
            *args: Positional arguments for the function
            **kwargs: Keyword arguments for the function

        Returns:
            The result of the function call
        """
        loop = asyncio.get_running_loop()
        if kwargs:
            return await loop.run_in_executor(self.executor, functools.partial(func, *args, **kwargs))
        return await loop.run_in_executor(self.executor, func, *args)

    def shutdown(self, wait: bool = True) -> None:
        """
        Shutdown the thread pool executor.

        Args:
            wait: If True, wait for pending tasks to complete.
                  If False, cancel pending tasks immediately.
        """
        if self._executor is not None:
            self._executor.shutdown(wait=wait, cancel_futures=not wait)
            self._executor = None

    async def __aenter__(self) -> "ConcurrencyManager":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.shutdown(wait=True)

    def __enter__(self) -> "ConcurrencyManager":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.shutdown(wait=True)
