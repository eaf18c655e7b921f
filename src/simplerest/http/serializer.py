"""JSON serialization backed by pydantic."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from ..errors import DecodeError, EncodeError


class Serializer(Protocol):
    """Protocol for converting between values and JSON text."""

    def encode(self, value: Any) -> str:
        """Encode a value as a JSON string."""
        ...

    def decode(self, text: str, type_: Any) -> Any:
        """
        Decode a JSON string into a value of type_.

        Raises:
            DecodeError: If text is not JSON or does not match type_
        """
        ...


@lru_cache(maxsize=256)
def _adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


class JsonSerializer:
    """
    Serializer using pydantic TypeAdapters as type descriptors.

    Any annotation pydantic understands works as a type: builtins, generic
    aliases such as list[int], dataclasses, TypedDicts and BaseModels.

    Example:
        serializer = JsonSerializer()
        serializer.decode('[{"id": 1}]', list[Post])
        serializer.encode(Post(id=1))  # '{"id":1}'
    """

    def encode(self, value: Any) -> str:
        try:
            return to_json(value).decode("utf-8")
        except PydanticSerializationError as e:
            raise EncodeError(f"Cannot encode {type(value).__name__} as JSON: {e}") from e

    def decode(self, text: str, type_: Any) -> Any:
        try:
            adapter = _adapter(type_)
        except TypeError:
            # Unhashable type descriptors skip the cache
            adapter = TypeAdapter(type_)
        try:
            return adapter.validate_json(text)
        except ValidationError as e:
            raise DecodeError(f"Body does not match {type_!r}: {e.error_count()} error(s)") from e
