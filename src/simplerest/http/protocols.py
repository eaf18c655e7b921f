"""Protocol definitions for the transport abstraction."""

from __future__ import annotations

import io
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Protocol

from requests.structures import CaseInsensitiveDict

DEFAULT_CHARSET = "utf-8"


@dataclass(frozen=True)
class TransportRequest:
    """
    Fully built request handed to a Transport.

    Attributes:
        method: HTTP method name (GET, POST, ...)
        url: Resolved URL including the query string
        headers: Final header mapping
        body: Encoded body, or None for methods without one
        content_type: Media type of body
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    content_type: Optional[str] = None


class RawResponse:
    """
    Undecoded response: status, headers and a body stream.

    The body stream is read at most once. Callers must close the response,
    or consume it through read_text(), which closes it.

    Example:
        response = RawResponse.from_bytes(200, {"Content-Type": "text/plain"}, b"hi")
        assert response.read_text() == "hi"
    """

    def __init__(
        self,
        status_code: int,
        headers: Mapping[str, str],
        stream: BinaryIO,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.headers: CaseInsensitiveDict[str] = CaseInsensitiveDict(headers)
        self.url = url
        self._stream = stream
        self._closed = False

    @classmethod
    def from_bytes(
        cls,
        status_code: int,
        headers: Optional[Mapping[str, str]] = None,
        content: bytes = b"",
        url: str = "",
    ) -> RawResponse:
        """Build a response around an in-memory body."""
        return cls(status_code, headers or {}, io.BytesIO(content), url=url)

    def __repr__(self) -> str:
        return f"<RawResponse [{self.status_code}] {self.url}>"

    @property
    def content_type(self) -> str:
        """Content-Type header value, empty when absent."""
        return self.headers.get("Content-Type", "")

    @property
    def media_subtype(self) -> Optional[str]:
        """Subtype of the declared media type ('json' for 'application/json; charset=utf-8')."""
        base_type = self.content_type.split(";")[0].strip().lower()
        if "/" not in base_type:
            return None
        return base_type.split("/", 1)[1]

    @property
    def charset(self) -> str:
        """Charset from the Content-Type header, UTF-8 when not declared."""
        for part in self.content_type.split(";")[1:]:
            part = part.strip()
            if part.lower().startswith("charset="):
                return part.split("=", 1)[1].strip().strip("\"'")
        return DEFAULT_CHARSET

    @property
    def content_length(self) -> Optional[int]:
        """Declared Content-Length, or None when absent or malformed."""
        value = self.headers.get("Content-Length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, size: Optional[int] = None) -> bytes:
        """Read up to size bytes from the body stream, or all of it."""
        if size is None:
            return self._stream.read()
        return self._stream.read(size)

    def iter_chunks(self, chunk_size: int = 8192) -> Iterator[bytes]:
        """Yield the body in chunks of at most chunk_size bytes."""
        while True:
            chunk = self._stream.read(chunk_size)
            if not chunk:
                return
            yield chunk

    def read_text(self) -> str:
        """Read the whole body as text and close the stream."""
        try:
            content = self._stream.read()
        finally:
            self.close()
        try:
            return content.decode(self.charset)
        except (UnicodeDecodeError, LookupError):
            return content.decode(DEFAULT_CHARSET, errors="replace")

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._stream.close()

    def __enter__(self) -> RawResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class Transport(Protocol):
    """
    Protocol for the component performing network calls.

    This abstraction allows for:
    - Stub implementations in tests
    - Different backends behind the same builder API
    """

    def send(self, request: TransportRequest) -> RawResponse:
        """
        Perform a request.

        Args:
            request: Fully built request

        Returns:
            RawResponse with an unread body stream

        Raises:
            Exception on network errors or timeouts
        """
        ...

    def close(self) -> None:
        """Release connections held by the transport."""
        ...
