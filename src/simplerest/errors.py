"""Exception hierarchy for simplerest."""

from __future__ import annotations


class SimpleRestError(Exception):
    """Base class for all simplerest errors."""


class CallFailedError(SimpleRestError, IOError):
    """
    The request could not be completed.

    Raised for every transport-level failure (connection refused, DNS,
    timeout, broken stream). The underlying exception is logged, not chained.
    """

    def __init__(self, message: str = "Call fails") -> None:
        super().__init__(message)


class DecodeError(SimpleRestError, ValueError):
    """A response body did not match the requested type."""


class InvalidResponseTypeError(SimpleRestError, ValueError):
    """The caller asked for a type the response body does not hold."""


class HttpStatusError(SimpleRestError):
    """A response arrived with a status code the operation cannot use."""

    def __init__(self, code: int, message: str | None = None) -> None:
        self.code = code
        super().__init__(message or f"Unexpected HTTP status {code}")


class RequestAlreadyExecutedError(SimpleRestError, RuntimeError):
    """A request builder was executed a second time."""


class ConfigurationError(SimpleRestError, RuntimeError):
    """Client configuration was changed when it no longer can be."""


class EncodeError(SimpleRestError, ValueError):
    """A request payload could not be encoded as JSON."""
