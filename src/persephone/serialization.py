"""
Serialization between typed values and stored strings

A schema may supply its own serialize/deserialize pair; otherwise values
go through JSON.
"""

import json
from typing import Any, Optional, Protocol

from .errors import SerializationError


class Codec(Protocol):
    """Encodes a value to stored text and back."""

    def serialize(self, value: Any) -> str: ...

    def deserialize(self, text: str) -> Any: ...


class JSONCodec:
    """Default codec: JSON text, non-ASCII kept as-is."""

    def serialize(self, value: Any) -> str:
        return json.dumps(value, ensure_ascii=False)

    def deserialize(self, text: str) -> Any:
        return json.loads(text)


class SchemaCodec:
    """Codec that prefers a schema's overrides and falls back per direction."""

    def __init__(self, schema, fallback: Optional[Codec] = None):
        self._schema = schema
        self._fallback = fallback or JSONCodec()

    def serialize(self, value: Any) -> str:
        if self._schema.serialize is not None:
            return self._schema.serialize(value)
        return self._fallback.serialize(value)

    def deserialize(self, text: str) -> Any:
        if self._schema.deserialize is not None:
            return self._schema.deserialize(text)
        return self._fallback.deserialize(text)


def codec_for(schema) -> Codec:
    """Codec for a schema: its overrides if any, JSON otherwise."""
    if schema is None or (schema.serialize is None and schema.deserialize is None):
        return JSONCodec()
    return SchemaCodec(schema)


def serialize(value: Any, schema=None, key: str = "unknown") -> str:
    """
    Encode a value for storage.

    Raises:
        SerializationError: If the codec cannot encode the value
    """
    try:
        return codec_for(schema).serialize(value)
    except (TypeError, ValueError) as e:
        raise SerializationError(str(e), key, e) from e


def deserialize(text: str, schema=None, key: str = "unknown") -> Any:
    """
    Decode a stored string.

    Raises:
        SerializationError: If the stored text cannot be decoded
    """
    try:
        return codec_for(schema).deserialize(text)
    except (TypeError, ValueError) as e:
        raise SerializationError(str(e), key, e) from e
