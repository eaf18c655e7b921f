"""Typed response model returned by request builders."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, get_origin

from ..errors import InvalidResponseTypeError

T = TypeVar("T")


@dataclass(frozen=True)
class SimpleResponse(Generic[T]):
    """
    Server response with its body decoded to the requested type.

    Attributes:
        body: Decoded body, or None when the status had no bound type or
              the body did not match it
        code: HTTP status code
        headers: Response headers (case-insensitive mapping)
    """

    body: T | None
    code: int
    headers: Mapping[str, str]

    @property
    def ok(self) -> bool:
        """True for a 200 response."""
        return self.code == 200

    def body_as(self, type_: Any) -> Any:
        """
        Return the body checked against a class.

        Useful after registering per-status types, where the body may hold
        something other than the type requested for 200.

        Raises:
            InvalidResponseTypeError: If the body is present but is not an
                instance of type_
        """
        if self.body is None:
            return None
        check = get_origin(type_) or type_
        if not isinstance(check, type):
            raise InvalidResponseTypeError(f"Cannot check response body against {type_!r}")
        if not isinstance(self.body, check):
            raise InvalidResponseTypeError(
                f"Response body is {type(self.body).__name__}, not {getattr(check, '__name__', check)}"
            )
        return self.body
