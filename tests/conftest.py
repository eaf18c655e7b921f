"""Shared fixtures: a counting stub transport and a client using it."""

import logging
import threading
from typing import Optional

import pytest
from pydantic import BaseModel
from simplerest import RawResponse, SimpleRest, TransportRequest


class Post(BaseModel):
    id: int
    title: str


class ErrorPayload(BaseModel):
    message: str


class StubTransport:
    """
    Transport returning canned responses and recording every request.

    The last queued response is repeated once the queue runs dry.
    """

    def __init__(self) -> None:
        self.requests: list[TransportRequest] = []
        self.error: Optional[Exception] = None
        self.closed = False
        self._responses: list[tuple[int, dict[str, str], bytes]] = []
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        with self._lock:
            return len(self.requests)

    def respond(self, status: int = 200, headers: Optional[dict[str, str]] = None, content: bytes = b"") -> None:
        self._responses.append((status, headers or {}, content))

    def respond_json(self, status: int, text: str) -> None:
        self.respond(status, {"Content-Type": "application/json; charset=utf-8"}, text.encode("utf-8"))

    def send(self, request: TransportRequest) -> RawResponse:
        with self._lock:
            self.requests.append(request)
            if self.error is not None:
                raise self.error
            if len(self._responses) > 1:
                status, headers, content = self._responses.pop(0)
            elif self._responses:
                status, headers, content = self._responses[0]
            else:
                status, headers, content = 200, {}, b""
        return RawResponse.from_bytes(status, headers, content, url=request.url)

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging during a test."""
    yield
    logger = logging.getLogger("simplerest")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def transport():
    """Create a stub transport."""
    return StubTransport()


@pytest.fixture
def client(transport):
    """Create a client with base URL https://a/api on the stub transport."""
    rest = SimpleRest("https://a/api", transport=transport)
    yield rest
    rest.close()
