"""SimpleRest client: entry point for building requests."""

from __future__ import annotations

import logging
import threading
from collections.abc import AsyncIterator, Mapping
from os import PathLike
from types import TracebackType
from typing import Any, Optional, Union

from ..concurrency import ConcurrencyManager
from ..errors import CallFailedError, ConfigurationError
from ..http.protocols import Transport
from ..http.serializer import JsonSerializer, Serializer
from ..http.transport import RequestsTransport
from ..models.config import ClientConfig, Timeouts
from ..models.events import DownloadState
from .builder import HttpMethod, RequestBuilder, encode_body
from .dispatcher import ResponseDispatcher
from .downloader import DEFAULT_CHUNK_SIZE, save_to_file

logger = logging.getLogger(__name__)


class SimpleRest:
    """
    Fluent REST client.

    Holds the base URL, timeouts and default headers shared by every
    request, and creates one RequestBuilder per call.

    Example:
        with SimpleRest("https://api.example.com/v1") as client:
            client.set_headers({"Authorization": "Bearer token"})

            news = client.get("/news").add_param("page", 2).get_response(list[News])
            created = client.post("/news", News(title="Hello")).get_response(News)

        async with SimpleRest("https://api.example.com/v1") as client:
            news = await client.get("/news").await_data(list[News])
    """

    def __init__(
        self,
        base_url: str = "",
        timeouts: Optional[Timeouts] = None,
        *,
        transport: Optional[Transport] = None,
        serializer: Optional[Serializer] = None,
        max_workers: int = 4,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Prefix for request paths that do not start with http
            timeouts: Timeouts for the default transport
            transport: Custom transport (a RequestsTransport is created lazily otherwise)
            serializer: Custom JSON serializer
            max_workers: Worker threads for awaitable calls, polling and downloads
            chunk_size: Buffer size for downloads
        """
        self._base_url = base_url
        self._timeouts = timeouts or Timeouts()
        self._transport = transport
        self._transport_used = False
        self._serializer = serializer or JsonSerializer()
        self._dispatcher = ResponseDispatcher(self._serializer)
        self._manager = ConcurrencyManager(max_workers=max_workers)
        self._chunk_size = chunk_size

        # Shared between caller threads
        self._lock = threading.Lock()
        self._default_headers: dict[str, str] = {}
        self._pending: set[RequestBuilder] = set()

    @classmethod
    def from_config(cls, config: ClientConfig, transport: Optional[Transport] = None) -> SimpleRest:
        """Create a client from a ClientConfig."""
        client = cls(
            config.base_url,
            config.timeouts,
            transport=transport,
            max_workers=config.max_workers,
            chunk_size=config.chunk_size,
        )
        client.set_headers(config.headers)
        return client

    # Configuration

    @property
    def base_url(self) -> str:
        return self._base_url

    def set_base_url(self, base_url: str) -> None:
        """Change the base URL used by requests built from now on."""
        self._base_url = base_url

    @property
    def timeouts(self) -> Timeouts:
        return self._timeouts

    def set_timeouts(self, timeouts: Timeouts) -> None:
        """
        Set timeouts for the default transport.

        A transport passed to the constructor keeps its own timeouts.

        Raises:
            ConfigurationError: If a request was already sent
        """
        with self._lock:
            if self._transport_used:
                raise ConfigurationError("Timeouts can only be changed before the first request")
            self._timeouts = timeouts

    @property
    def default_headers(self) -> dict[str, str]:
        """Snapshot of the headers sent with every request."""
        with self._lock:
            return dict(self._default_headers)

    def set_headers(self, headers: Mapping[str, Any]) -> None:
        """Add or replace default headers for all requests."""
        with self._lock:
            for name, value in headers.items():
                self._default_headers[name] = str(value)

    @property
    def transport(self) -> Transport:
        """Get or create the transport. Marks the client as started."""
        with self._lock:
            if self._transport is None:
                self._transport = RequestsTransport(self._timeouts)
            self._transport_used = True
            return self._transport

    @property
    def dispatcher(self) -> ResponseDispatcher:
        return self._dispatcher

    @property
    def manager(self) -> ConcurrencyManager:
        return self._manager

    # In-flight registry

    @property
    def pending_count(self) -> int:
        """Number of builders created but not yet executed."""
        with self._lock:
            return len(self._pending)

    def _register(self, builder: RequestBuilder) -> None:
        with self._lock:
            self._pending.add(builder)

    def _release(self, builder: RequestBuilder) -> None:
        with self._lock:
            self._pending.discard(builder)

    # Request factories

    def _builder(
        self,
        method: HttpMethod,
        url: str,
        data: Any = None,
        with_body: bool = False,
    ) -> RequestBuilder:
        body: Optional[bytes] = None
        content_type: Optional[str] = None
        if with_body or data is not None:
            # Write methods always carry a body, empty text when there is no data
            body, content_type = encode_body("" if data is None else data, self._serializer)
        builder = RequestBuilder(self, method, url, body, content_type)
        self._register(builder)
        return builder

    def get(self, url: str) -> RequestBuilder:
        """Start a GET request. Paths not starting with http are appended to the base URL."""
        return self._builder(HttpMethod.GET, url)

    def post(self, url: str, data: Any = None) -> RequestBuilder:
        """
        Start a POST request.

        Args:
            url: Absolute URL, or path appended to the base URL
            data: Payload; strings, numbers and booleans are sent as text,
                  other values as JSON
        """
        return self._builder(HttpMethod.POST, url, data, with_body=True)

    def put(self, url: str, data: Any = None) -> RequestBuilder:
        """Start a PUT request. Payload handling matches post()."""
        return self._builder(HttpMethod.PUT, url, data, with_body=True)

    def head(self, url: str) -> RequestBuilder:
        """Start a HEAD request."""
        return self._builder(HttpMethod.HEAD, url)

    def delete(self, url: str, data: Any = None) -> RequestBuilder:
        """Start a DELETE request, with a body only when data is given."""
        return self._builder(HttpMethod.DELETE, url, data)

    # Downloads

    async def download(
        self,
        url: str,
        destination: Union[str, PathLike],
        *,
        chunk_size: Optional[int] = None,
    ) -> AsyncIterator[DownloadState]:
        """
        GET a URL and stream the body into a file.

        A failed call is reported as a FAILED state, not raised.

        Example:
            async for state in client.download("/files/report.pdf", "report.pdf"):
                print(state.status, state.progress)
        """
        try:
            response = await self.get(url).await_raw_response()
        except CallFailedError as e:
            yield DownloadState.failed(e)
            return

        async for state in save_to_file(
            response,
            destination,
            chunk_size=chunk_size or self._chunk_size,
            manager=self._manager,
        ):
            yield state

    # Lifecycle

    def close(self) -> None:
        """Shut down the worker pool and release transport connections."""
        self._manager.shutdown(wait=True)
        if self._transport is not None:
            self._transport.close()

    def __enter__(self) -> SimpleRest:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    async def __aenter__(self) -> SimpleRest:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
