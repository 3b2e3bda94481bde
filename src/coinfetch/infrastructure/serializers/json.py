"""JSON codec for upstream response bodies and stored watchlists."""

import json
from typing import Any


class SerializationError(Exception):
    """Raised when serialization or deserialization fails."""

    pass


class JsonSerializer:
    """Compact JSON codec.

    Response bodies are decoded on every cache hit, so decoding is strict
    about the text encoding. Encoding writes compact, NaN-free JSON that
    any upstream-compatible parser can read back.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def serialize(self, value: Any) -> bytes:
        """Encode a JSON-compatible value.

        Raises:
            SerializationError: If the value holds something JSON cannot
                represent, including NaN and infinite floats.
        """
        try:
            text = json.dumps(value, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to serialize value: {e}") from e
        return text.encode(self._encoding)

    def deserialize(self, data: bytes) -> Any:
        """Decode a body received from the upstream or read from storage.

        Raises:
            SerializationError: If the body is empty, not valid text in the
                configured encoding, or not valid JSON.
        """
        if not data.strip():
            raise SerializationError("Failed to deserialize data: empty body")
        try:
            return json.loads(data.decode(self._encoding))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SerializationError(f"Failed to deserialize data: {e}") from e
