"""Request building, dispatch, polling and downloads."""

from .builder import HttpMethod, RequestBuilder
from .client import SimpleRest
from .dispatcher import ResponseDispatcher
from .downloader import save_to_file
from .poller import Poller

__all__ = [
    "HttpMethod",
    "Poller",
    "RequestBuilder",
    "ResponseDispatcher",
    "SimpleRest",
    "save_to_file",
]
