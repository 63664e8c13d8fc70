"""Native key codecs: external string identifiers <-> MongoDB ``_id`` values."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from bson import ObjectId
from bson.errors import InvalidId

from .exceptions import ConfigurationError, InvalidIdentifier


def key_to_string(key: Any) -> str:
    """Render a native key as the string callers see.

    Keys exposing their raw canonical bytes (``ObjectId.binary``) become
    lowercase hex; anything else falls back to ``str()``.
    """
    raw = getattr(key, "binary", None)
    if isinstance(raw, bytes):
        return raw.hex()
    return str(key)


@runtime_checkable
class KeyCodec(Protocol):
    """Parses external identifiers into native keys and back."""

    def parse(self, value: Any) -> Any:
        """Return the native key for ``value``; raise InvalidIdentifier if malformed."""
        ...

    def to_string(self, key: Any) -> str: ...


class ObjectIdCodec:
    """Keys are BSON ObjectIds (MongoDB's default ``_id``)."""

    def parse(self, value: Any) -> ObjectId:
        if isinstance(value, ObjectId):
            return value
        if not isinstance(value, str):
            raise InvalidIdentifier(value, "expected a 24-character hex string")
        try:
            return ObjectId(value)
        except InvalidId as e:
            raise InvalidIdentifier(value, str(e)) from e

    def to_string(self, key: Any) -> str:
        return key_to_string(key)


class StringKeyCodec:
    """Keys are plain strings chosen by the application (e.g. UUIDs)."""

    def parse(self, value: Any) -> str:
        if not isinstance(value, str) or not value:
            raise InvalidIdentifier(value, "expected a non-empty string")
        return value

    def to_string(self, key: Any) -> str:
        return key_to_string(key)


_CODECS: dict[str, type[ObjectIdCodec] | type[StringKeyCodec]] = {
    "objectid": ObjectIdCodec,
    "string": StringKeyCodec,
}


def codec_for(key_type: str) -> KeyCodec:
    """Look up a codec by its configuration name."""
    try:
        return _CODECS[key_type.lower()]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown key type {key_type!r}; expected one of {sorted(_CODECS)}"
        ) from None
