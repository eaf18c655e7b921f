"""
simplerest - Fluent REST client with typed responses, polling and downloads.

Usage:
    from simplerest import SimpleRest, Timeouts

    client = SimpleRest("https://api.example.com/v1", Timeouts(connect=5))

    response = client.get("/news").add_param("page", 2).get_response(list[News])
    print(response.code, response.body)

    async for status in client.get("/status").to_flow(Status, interval=5):
        print(status)
"""

__version__ = "1.0.0"

from .core.builder import HttpMethod, RequestBuilder
from .core.client import SimpleRest
from .core.dispatcher import ResponseDispatcher
from .core.downloader import save_to_file
from .core.poller import Poller
from .errors import (
    CallFailedError,
    ConfigurationError,
    DecodeError,
    EncodeError,
    HttpStatusError,
    InvalidResponseTypeError,
    RequestAlreadyExecutedError,
    SimpleRestError,
)
from .http import JsonSerializer, RawResponse, RequestsTransport, Serializer, Transport, TransportRequest
from .models import ClientConfig, DownloadState, DownloadStatus, SimpleResponse, Timeouts, TimeUnit

__all__ = [
    "__version__",
    # Core
    "SimpleRest",
    "RequestBuilder",
    "HttpMethod",
    "ResponseDispatcher",
    "Poller",
    "save_to_file",
    # Models
    "ClientConfig",
    "Timeouts",
    "TimeUnit",
    "SimpleResponse",
    "DownloadState",
    "DownloadStatus",
    # Collaborators
    "Transport",
    "TransportRequest",
    "RawResponse",
    "RequestsTransport",
    "Serializer",
    "JsonSerializer",
    # Errors
    "SimpleRestError",
    "CallFailedError",
    "DecodeError",
    "EncodeError",
    "HttpStatusError",
    "InvalidResponseTypeError",
    "RequestAlreadyExecutedError",
    "ConfigurationError",
]
