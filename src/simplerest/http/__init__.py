"""Transport and serialization collaborators for simplerest."""

from .protocols import RawResponse, Transport, TransportRequest
from .serializer import JsonSerializer, Serializer
from .transport import RequestsTransport

__all__ = [
    "JsonSerializer",
    "RawResponse",
    "RequestsTransport",
    "Serializer",
    "Transport",
    "TransportRequest",
]
