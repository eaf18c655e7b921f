"""Repeating request stream."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..concurrency import ConcurrencyManager

if TYPE_CHECKING:
    from .builder import RequestBuilder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Failure:
    """Error raised by the producer, re-raised on the consumer side."""

    error: BaseException


class Poller:
    """
    Lazy, unbounded stream of decoded bodies from a repeated request.

    Nothing is sent until iteration starts. Each `async for` starts its own
    producer, so a Poller can be iterated again after the consumer stops.
    The producer runs ahead of the consumer into an unbounded queue; it
    executes a copy of the template request, queues the body (possibly
    None), then sleeps for the interval.

    Leaving the loop (break, aclose(), task cancellation) cancels the
    producer. A request already running in a worker thread completes, but
    its result is dropped and no further request is started. A transport
    failure ends the stream with CallFailedError.

    Example:
        poller = client.get("/status").to_flow(Status, interval=2.0)

        async for status in poller:
            if status and status.ready:
                break
    """

    def __init__(
        self,
        template: RequestBuilder,
        response_type: Any,
        interval: float,
        manager: ConcurrencyManager,
    ) -> None:
        """
        Initialize the poller.

        Args:
            template: Builder copied for each request
            response_type: Type expected for 200 responses
            interval: Seconds to wait after each emission
            manager: Worker pool running the blocking calls

        Raises:
            ValueError: If interval is negative
        """
        if interval < 0:
            raise ValueError(f"Polling interval must not be negative, got {interval}")
        self._template = template
        self._response_type = response_type
        self._interval = interval
        self._manager = manager

    @property
    def interval(self) -> float:
        return self._interval

    def __aiter__(self) -> AsyncIterator[Any]:
        return self._stream()

    def _poll_once(self) -> Any:
        # Fork on the worker so a job cancelled before it starts never registers a copy
        return self._template.fork().get_response(self._response_type)

    async def _produce(self, queue: asyncio.Queue) -> None:
        try:
            while True:
                response = await self._manager.run_blocking(self._poll_once)
                queue.put_nowait(response.body)
                await asyncio.sleep(self._interval)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Polling {self._template.url} stopped: {e}")
            queue.put_nowait(_Failure(e))

    async def _stream(self) -> AsyncIterator[Any]:
        queue: asyncio.Queue = asyncio.Queue()
        producer = asyncio.create_task(self._produce(queue))
        try:
            while True:
                item = await queue.get()
                if isinstance(item, _Failure):
                    raise item.error
                yield item
        finally:
            producer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await producer
            logger.debug(f"Polling {self._template.url} cancelled")
