"""Status-code based selection and decoding of response bodies."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from ..http.protocols import RawResponse
from ..http.serializer import JsonSerializer, Serializer

logger = logging.getLogger(__name__)

# Target types that can hold a raw string body
TEXT_TARGETS: tuple[Any, ...] = (str, Any, object)

SUCCESS_CODE = 200


def accepts_text(type_: Any) -> bool:
    """Check if a raw string is a valid value for type_."""
    return any(type_ is target for target in TEXT_TARGETS)


def is_json_subtype(subtype: Optional[str]) -> bool:
    """Match 'json' and structured suffixes such as 'problem+json'."""
    return subtype is not None and (subtype == "json" or subtype.endswith("+json"))


class ResponseDispatcher:
    """
    Picks the type bound to a response's status code and decodes the body.

    Resolution:
        1. The type registered for the status code, if any
        2. Otherwise the statically requested type, but only for 200;
           other codes without a binding yield None without reading the body

    Decoding by declared media type:
        - text/* (or no Content-Type): the raw string, if the target accepts one
        - */json, */*+json: the serializer, against the selected type
        - anything else: the raw string, if the target accepts one

    Bodies that do not match the selected type decode to None. Errors
    reading the body stream propagate to the caller.

    Example:
        dispatcher = ResponseDispatcher()
        body = dispatcher.dispatch(raw, list[Post], {404: ErrorPayload})
    """

    def __init__(self, serializer: Optional[Serializer] = None) -> None:
        self._serializer = serializer or JsonSerializer()

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    @staticmethod
    def select_type(code: int, requested_type: Any, bindings: Mapping[int, Any]) -> Any:
        """Return the type bound to code, falling back to requested_type."""
        return bindings.get(code, requested_type)

    def dispatch(
        self,
        response: RawResponse,
        requested_type: Any,
        bindings: Mapping[int, Any],
    ) -> Any:
        """
        Decode a response body.

        Args:
            response: Response with an unread body; it is closed on return
            requested_type: Type expected for a 200 response
            bindings: Types registered per status code

        Returns:
            The decoded body, or None
        """
        code = response.status_code
        if code != SUCCESS_CODE and code not in bindings:
            response.close()
            return None

        target = self.select_type(code, requested_type, bindings)
        text = response.read_text()
        main_type = response.content_type.split("/", 1)[0].strip().lower()
        subtype = response.media_subtype

        if not response.content_type or main_type == "text":
            return text if accepts_text(target) else None

        if is_json_subtype(subtype):
            try:
                return self._serializer.decode(text, target)
            except Exception as e:
                logger.debug(f"Discarding {code} body from {response.url or 'response'}: {e}")
                return None

        return text if accepts_text(target) else None
