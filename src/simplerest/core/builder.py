"""Fluent request builder: one logical HTTP call."""

from __future__ import annotations

import logging
import numbers
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from requests.structures import CaseInsensitiveDict

from ..errors import CallFailedError, RequestAlreadyExecutedError
from ..http.protocols import RawResponse, TransportRequest
from ..http.serializer import Serializer
from ..models.response import SimpleResponse
from .poller import Poller

if TYPE_CHECKING:
    from .client import SimpleRest

logger = logging.getLogger(__name__)

# Media types for request bodies
JSON_MEDIA_TYPE = "application/json; charset=utf-8"
TEXT_MEDIA_TYPE = "text/plain; charset=utf-8"
BINARY_MEDIA_TYPE = "application/octet-stream"


class HttpMethod(str, Enum):
    """HTTP methods a builder can issue."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    HEAD = "HEAD"
    DELETE = "DELETE"


def stringify(value: Any) -> str:
    """Render a parameter or header value, booleans in lowercase."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_body(data: Any, serializer: Serializer) -> tuple[bytes, str]:
    """
    Encode a payload for a write method.

    Strings, numbers and booleans travel as plain text, bytes as an octet
    stream, everything else as JSON.

    Returns:
        Tuple of (encoded body, media type)
    """
    if isinstance(data, (bytes, bytearray)):
        return bytes(data), BINARY_MEDIA_TYPE
    if isinstance(data, (str, bool, numbers.Number)):
        return stringify(data).encode("utf-8"), TEXT_MEDIA_TYPE
    return serializer.encode(data).encode("utf-8"), JSON_MEDIA_TYPE


class RequestBuilder:
    """
    Accumulates one request and executes it once.

    Builders are created by a SimpleRest client and stay in its in-flight
    registry until executed. Configuration calls chain:

    Example:
        response = (
            client.get("/news")
            .add_param("page", 2)
            .add_header("Accept-Language", "en")
            .add_response_type(404, ErrorPayload)
            .get_response(list[News])
        )
        if response.code == 404:
            error = response.body_as(ErrorPayload)
    """

    def __init__(
        self,
        client: SimpleRest,
        method: HttpMethod,
        url: str,
        body: Optional[bytes] = None,
        content_type: Optional[str] = None,
    ) -> None:
        self._client = client
        self.method = method
        self.url = url
        self._body = body
        self._content_type = content_type
        self._params: dict[str, str] = {}
        self._headers: dict[str, str] = {}
        self._response_types: dict[int, Any] = {}
        self._executed = False

    def __repr__(self) -> str:
        return f"<RequestBuilder {self.method.value} {self.url}>"

    @property
    def params(self) -> dict[str, str]:
        return dict(self._params)

    @property
    def headers(self) -> dict[str, str]:
        """Request-level headers, without the client defaults."""
        return dict(self._headers)

    @property
    def response_types(self) -> dict[int, Any]:
        return dict(self._response_types)

    @property
    def executed(self) -> bool:
        return self._executed

    def add_param(self, name: str, value: Any) -> RequestBuilder:
        """
        Add a query parameter. A later value for the same name wins.

        Parameters are appended after '?' and separated by '&'; values are
        not percent-encoded.
        """
        self._params[name] = stringify(value)
        return self

    def add_header(self, name: str, value: Any) -> RequestBuilder:
        """Add a header. Overrides a client default header with the same name."""
        self._headers[name] = stringify(value)
        return self

    def add_response_type(self, code: int, type_: Any) -> RequestBuilder:
        """
        Bind a decode type to an HTTP status code.

        The type for 200 normally comes from get_response(); binding 200 here
        replaces it explicitly.

        Raises:
            ValueError: If code is not an HTTP status code
        """
        if not 100 <= code <= 599:
            raise ValueError(f"Not an HTTP status code: {code}")
        self._response_types[code] = type_
        return self

    def response_type_for(self, code: int, default: Any = None) -> Any:
        """Return the type bound to code, or default when none is."""
        return self._response_types.get(code, default)

    def build_url(self) -> str:
        """Assemble base URL, target and query string."""
        base_url = self._client.base_url
        if base_url.strip() and not self.url.startswith("http"):
            full_path = f"{base_url}{self.url}"
        else:
            full_path = self.url

        query = "&".join(f"{key}={value}" for key, value in self._params.items())
        if query:
            separator = "&" if "?" in full_path else "?"
            full_path = f"{full_path}{separator}{query}"

        if full_path.endswith(("?", "&")):
            full_path = full_path[:-1]
        return full_path

    def build(self) -> TransportRequest:
        """Build the transport request, merging client default headers."""
        headers: CaseInsensitiveDict[str] = CaseInsensitiveDict(self._client.default_headers)
        headers.update(self._headers)
        return TransportRequest(
            method=self.method.value,
            url=self.build_url(),
            headers=headers,
            body=self._body,
            content_type=self._content_type,
        )

    def fork(self) -> RequestBuilder:
        """Create an unexecuted copy of this builder, registered with the client."""
        builder = RequestBuilder(self._client, self.method, self.url, self._body, self._content_type)
        builder._params = dict(self._params)
        builder._headers = dict(self._headers)
        builder._response_types = dict(self._response_types)
        self._client._register(builder)
        return builder

    def _begin(self) -> TransportRequest:
        if self._executed:
            raise RequestAlreadyExecutedError(f"{self!r} was already executed")
        self._executed = True
        return self.build()

    def get_raw_response(self) -> RawResponse:
        """
        Execute the request and return the response undecoded.

        The caller owns the returned response and must close it.

        Raises:
            CallFailedError: On any transport failure
            RequestAlreadyExecutedError: If this builder already ran
        """
        try:
            request = self._begin()
            try:
                return self._client.transport.send(request)
            except Exception as e:
                logger.error(f"{request.method} {request.url} failed: {e}")
                raise CallFailedError() from None
        finally:
            self._client._release(self)

    def get_response(self, response_type: Any = Any) -> SimpleResponse[Any]:
        """
        Execute the request and decode the body.

        Args:
            response_type: Type expected for a 200 response. Any decodes JSON
                           to plain Python values and keeps text as str.

        Returns:
            SimpleResponse with the decoded body (None when the status has no
            bound type or the body does not match it)

        Raises:
            CallFailedError: On any transport failure
            RequestAlreadyExecutedError: If this builder already ran
        """
        try:
            request = self._begin()
            try:
                response = self._client.transport.send(request)
                body = self._client.dispatcher.dispatch(response, response_type, self._response_types)
            except Exception as e:
                logger.error(f"{request.method} {request.url} failed: {e}")
                raise CallFailedError() from None
        finally:
            self._client._release(self)

        return SimpleResponse(body=body, code=response.status_code, headers=response.headers)

    async def await_raw_response(self) -> RawResponse:
        """Run get_raw_response() on the client's worker pool."""
        return await self._client.manager.run_blocking(self.get_raw_response)

    async def await_response(self, response_type: Any = Any) -> SimpleResponse[Any]:
        """Run get_response() on the client's worker pool."""
        return await self._client.manager.run_blocking(self.get_response, response_type)

    async def await_data(self, response_type: Any = Any) -> Any:
        """Run the request on the worker pool and return only the decoded body."""
        response = await self.await_response(response_type)
        return response.body

    def to_flow(self, response_type: Any = Any, interval: float = 1.0) -> Poller:
        """
        Turn this builder into a template re-issued every interval seconds.

        The builder itself is never executed afterwards; each poll runs a
        fresh copy of it.

        Example:
            async for prices in client.get("/prices").to_flow(list[Price], interval=5):
                render(prices)
        """
        if self._executed:
            raise RequestAlreadyExecutedError(f"{self!r} was already executed")
        self._executed = True
        self._client._release(self)
        return Poller(self, response_type, interval, self._client.manager)
