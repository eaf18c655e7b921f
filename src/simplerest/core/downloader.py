"""Chunked streaming of a response body into a file."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from os import PathLike
from pathlib import Path
from typing import Any, Callable, Optional, Union

from ..concurrency import ConcurrencyManager
from ..errors import HttpStatusError
from ..http.protocols import RawResponse
from ..models.events import DownloadState

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192


def compute_progress(done: int, total: int) -> int:
    """Whole percent of total transferred, capped at 100."""
    return min(done * 100 // total, 100)


async def save_to_file(
    response: RawResponse,
    destination: Union[str, PathLike],
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    manager: Optional[ConcurrencyManager] = None,
) -> AsyncIterator[DownloadState]:
    """
    Stream a response body into a file, yielding progress states.

    Sequence:
        - non-200 status: FAILED only, no file is created
        - otherwise STARTED, then DOWNLOADING(progress) after each chunk
          whose whole percent differs from the previous one, then FINISHED
        - an empty body (Content-Length: 0) goes straight to FINISHED
        - without a Content-Length no DOWNLOADING states are emitted
        - an I/O error ends the sequence with FAILED(cause)

    The response is always closed, including when the consumer stops
    iterating early. Blocking reads and writes run on the manager's worker
    pool, or in asyncio's default thread pool when no manager is given.

    Args:
        response: Executed response with an unread body
        destination: File to write; parent directories are created
        chunk_size: Read buffer size in bytes
        manager: Optional worker pool for blocking I/O

    Example:
        response = await client.get("/files/big.zip").await_raw_response()
        async for state in save_to_file(response, "big.zip"):
            print(state.status.value, state.progress or "")
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    run: Callable[..., Any] = manager.run_blocking if manager is not None else asyncio.to_thread
    path = Path(destination)

    if response.status_code != 200:
        response.close()
        logger.warning(f"Not saving {response.url or path}: HTTP {response.status_code}")
        yield DownloadState.failed(HttpStatusError(response.status_code))
        return

    yield DownloadState.started()

    total = response.content_length
    handle = None
    try:
        await run(path.parent.mkdir, parents=True, exist_ok=True)
        handle = await run(path.open, "wb")

        if total == 0:
            logger.debug(f"Empty body saved to {path}")
            yield DownloadState.finished()
            return

        done = 0
        last_progress: Optional[int] = None
        while True:
            chunk = await run(response.read, chunk_size)
            if not chunk:
                break
            await run(handle.write, chunk)
            done += len(chunk)

            if total:
                progress = compute_progress(done, total)
                if progress != last_progress:
                    last_progress = progress
                    yield DownloadState.downloading(progress)

        logger.info(f"Saved {done} bytes to {path}")
        yield DownloadState.finished()

    except OSError as e:
        logger.error(f"Download to {path} failed: {e}")
        yield DownloadState.failed(e)

    finally:
        response.close()
        if handle is not None:
            handle.close()
