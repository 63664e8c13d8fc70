"""BSON document <-> plain Python values and pydantic schema round-trip."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, cast
from uuid import UUID

from bson import Decimal128, ObjectId
from pydantic import BaseModel, ValidationError

from .exceptions import EntityValidationError
from .keys import key_to_string


def _serialize_value(value: Any) -> Any:
    """Convert Python types to BSON-safe types."""
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


def _deserialize_value(value: Any) -> Any:
    """Convert BSON types back to plain Python types."""
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, ObjectId):
        return key_to_string(value)
    if isinstance(value, dict):
        return {k: _deserialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_deserialize_value(v) for v in value]
    return value


def entity_to_object(doc: dict[str, Any]) -> dict[str, Any]:
    """Return a plain copy of a stored document.

    ``ObjectId`` values (``_id`` included) become hex strings and
    ``Decimal128`` becomes ``Decimal``; the input is not modified.
    """
    return cast("dict[str, Any]", _deserialize_value(dict(doc)))


def validate_with_schema(
    schema: type[BaseModel], doc: dict[str, Any]
) -> dict[str, Any]:
    """Validate ``doc`` against ``schema`` and return the normalised document.

    ``_id`` is not part of the schema; it is carried over unchanged. Fields
    the schema fills with defaults are included in the result.
    """
    data = dict(doc)
    key = data.pop("_id", None)
    try:
        model = schema.model_validate(data)
    except ValidationError as e:
        raise EntityValidationError(str(e)) from e
    result = cast("dict[str, Any]", _serialize_value(model.model_dump(mode="python")))
    if key is not None:
        result["_id"] = key
    return result
