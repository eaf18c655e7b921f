"""Blocking transport built on a requests session."""

from __future__ import annotations

import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from ..models.config import Timeouts
from .protocols import RawResponse, TransportRequest

logger = logging.getLogger(__name__)


class _ResponseStream:
    """File-like view over a streamed requests.Response body."""

    def __init__(self, response: requests.Response) -> None:
        self._response = response

    def read(self, size: Optional[int] = None) -> bytes:
        try:
            return self._response.raw.read(size, decode_content=True) or b""
        except Urllib3HTTPError as e:
            raise OSError(f"Failed reading response body: {e}") from e

    def close(self) -> None:
        self._response.close()


class RequestsTransport:
    """
    Transport that sends requests through a requests.Session.

    Connection pooling, TLS and DNS are left to requests/urllib3. No retries
    are configured: every call is a single attempt.

    Example:
        transport = RequestsTransport(Timeouts(connect=5, read=30))
        response = transport.send(TransportRequest("GET", "https://example.com"))
        print(response.read_text())
    """

    def __init__(
        self,
        timeouts: Optional[Timeouts] = None,
        session: Optional[requests.Session] = None,
        pool_maxsize: int = 10,
    ) -> None:
        """
        Initialize the transport.

        Args:
            timeouts: Timeouts applied to every request
            session: Optional preconfigured session (a new one is created otherwise)
            pool_maxsize: Connections kept per host by the adapter
        """
        self._timeouts = timeouts or Timeouts()
        self._timeout = self._timeouts.to_urllib3()
        self._session = session
        self._pool_maxsize = pool_maxsize

    @property
    def timeouts(self) -> Timeouts:
        return self._timeouts

    @property
    def session(self) -> requests.Session:
        """Get or create the underlying session."""
        if self._session is None:
            session = requests.Session()
            adapter = HTTPAdapter(pool_maxsize=self._pool_maxsize, max_retries=0)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
            self._session = session
        return self._session

    def send(self, request: TransportRequest) -> RawResponse:
        """
        Perform a request and return the response with an unread body.

        Raises:
            requests.RequestException: On connection errors and timeouts
        """
        headers: CaseInsensitiveDict[str] = CaseInsensitiveDict(request.headers)
        if request.body is not None and request.content_type:
            headers.setdefault("Content-Type", request.content_type)

        logger.debug(f"{request.method} {request.url}")
        response = self.session.request(
            request.method,
            request.url,
            headers=headers,
            data=request.body,
            timeout=self._timeout,
            stream=True,
            allow_redirects=True,
        )
        logger.debug(f"{request.method} {request.url} -> {response.status_code}")

        return RawResponse(
            status_code=response.status_code,
            headers=response.headers,
            stream=_ResponseStream(response),  # type: ignore[arg-type]
            url=response.url,
        )

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
