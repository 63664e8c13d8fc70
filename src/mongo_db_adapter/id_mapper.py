"""Map between the store's ``_id`` and a service-chosen identifier field."""

from __future__ import annotations

import copy
from typing import Any

from .keys import KeyCodec, ObjectIdCodec

NATIVE_KEY = "_id"

Entity = dict[str, Any]


class IdentifierMapper:
    """
    Rewrites entities so ``_id`` and the external id field never coexist.

    * :meth:`to_internal` runs before a write: ``{"id": "5f..."}`` becomes
      ``{"_id": ObjectId("5f...")}`` on a deep copy.
    * :meth:`to_external` runs after a read: ``{"_id": ObjectId(...)}``
      becomes ``{"id": "5f..."}`` in place.

    With ``id_field == "_id"`` both directions are no-ops.
    """

    def __init__(self, codec: KeyCodec | None = None) -> None:
        self._codec = codec or ObjectIdCodec()

    @property
    def codec(self) -> KeyCodec:
        return self._codec

    def to_internal(self, entity: Entity, id_field: str) -> Entity:
        """Return a copy of ``entity`` keyed by a native ``_id``.

        Raises:
            InvalidIdentifier: The external id is not a valid native key. The
                input entity is left untouched.
        """
        new_entity = copy.deepcopy(entity)
        if id_field == NATIVE_KEY:
            return new_entity

        value = new_entity.pop(id_field, None)
        if value is None:
            # Store generates the key
            new_entity.pop(NATIVE_KEY, None)
            return new_entity

        new_entity[NATIVE_KEY] = self._codec.parse(value)
        return new_entity

    def to_external(self, entity: Entity, id_field: str) -> Entity:
        """Replace ``_id`` with its string form under ``id_field``."""
        if id_field == NATIVE_KEY or NATIVE_KEY not in entity:
            return entity
        key = entity.pop(NATIVE_KEY)
        if key is not None:
            entity[id_field] = self._codec.to_string(key)
        return entity
