"""simplerest configuration, response and event models."""

from .config import ClientConfig, Timeouts, TimeUnit
from .events import DownloadState, DownloadStatus
from .response import SimpleResponse

__all__ = [
    # Config
    "ClientConfig",
    "TimeUnit",
    "Timeouts",
    # Events
    "DownloadState",
    "DownloadStatus",
    # Responses
    "SimpleResponse",
]
