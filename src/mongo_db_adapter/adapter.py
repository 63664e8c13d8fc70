"""MongoDbAdapter — CRUD and query contract for a service over one collection."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pymongo import ReturnDocument

from .exceptions import ConfigurationError, MongoConnectionError
from .id_mapper import NATIVE_KEY, Entity, IdentifierMapper
from .query_builder import MongoQueryBuilder
from .serialization import entity_to_object, validate_with_schema

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

    from pydantic import BaseModel

    from .connection import MongoConnectionManager
    from .cursor import QueryCursor
    from .filters import FilterSpec
    from .keys import KeyCodec

logger = logging.getLogger("mongo_db_adapter.adapter")


@dataclass(frozen=True)
class ServiceSchema:
    """
    What a service declares about its storage.

    Attributes:
        model: A collection handle already bound to a database. When given,
            the adapter uses it as is.
        schema: Pydantic model that inserted documents are validated against.
        model_name: Collection name; required together with ``schema``.
    """

    model: Any = None
    schema: type[BaseModel] | None = None
    model_name: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ServiceSchema:
        return cls(
            model=data.get("model"),
            schema=data.get("schema"),
            model_name=data.get("model_name", data.get("modelName")),
        )


def _as_update(update: Mapping[str, Any]) -> dict[str, Any]:
    """Move plain fields under ``$set``; operator keys pass through."""
    ops = {k: v for k, v in update.items() if str(k).startswith("$")}
    fields = {k: v for k, v in update.items() if not str(k).startswith("$")}
    if fields or not ops:
        ops["$set"] = {**ops.get("$set", {}), **fields}
    return ops


class MongoDbAdapter:
    """
    Adapter between a service and a MongoDB collection.

    Call :meth:`init` with the service's :class:`ServiceSchema`, then
    :meth:`connect`. Filters for :meth:`find` and :meth:`count` are translated
    by :class:`MongoQueryBuilder`; ids are reconciled with the service's id
    field through :meth:`before_save_transform_id` and
    :meth:`after_retrieve_transform_id`.
    """

    def __init__(
        self,
        connection: MongoConnectionManager | None = None,
        *,
        id_field: str = NATIVE_KEY,
        key_codec: KeyCodec | None = None,
    ) -> None:
        self._connection = connection
        self.id_field = id_field
        self._id_mapper = IdentifierMapper(key_codec)
        self._model: Any = None
        self._schema: type[BaseModel] | None = None
        self._model_name: str | None = None
        self._collection: Any = None
        self._query_builder: MongoQueryBuilder | None = None

    def init(self, schema: ServiceSchema | Mapping[str, Any]) -> None:
        """Read the service's storage declaration.

        Raises:
            ConfigurationError: ``schema`` is given without ``model_name``, or
                neither ``model`` nor ``schema`` is given.
        """
        if isinstance(schema, Mapping):
            schema = ServiceSchema.from_mapping(schema)
        if schema.model is not None:
            self._model = schema.model
        elif schema.schema is not None:
            if not schema.model_name:
                raise ConfigurationError(
                    "`model_name` is required when `schema` is given "
                    "in schema of service!"
                )
            self._schema = schema.schema
            self._model_name = schema.model_name
        if self._model is None and self._schema is None:
            raise ConfigurationError(
                "Missing `model` or `schema` definition in schema of service!"
            )

    async def connect(self) -> None:
        """Bind the collection, connecting through the manager if needed."""
        if self._model is not None:
            self._collection = self._model
        elif self._schema is not None:
            if self._connection is None:
                raise ConfigurationError(
                    "A MongoConnectionManager is required when only `schema` is given"
                )
            await self._connection.connect()
            self._collection = self._connection.get_database().get_collection(
                self._model_name
            )
        else:
            raise ConfigurationError("Adapter is not initialised; call init() first")
        self._query_builder = MongoQueryBuilder(self._collection)
        logger.info("Adapter bound to collection %r", self._collection_name())

    async def disconnect(self) -> None:
        if self._connection is not None:
            self._connection.close()
        self._collection = None
        self._query_builder = None

    def _collection_name(self) -> str | None:
        return getattr(self._collection, "name", self._model_name)

    @property
    def collection(self) -> Any:
        if self._collection is None:
            raise MongoConnectionError(
                "Adapter is not connected; call connect() first"
            )
        return self._collection

    @property
    def query_builder(self) -> MongoQueryBuilder:
        if self._query_builder is None:
            raise MongoConnectionError(
                "Adapter is not connected; call connect() first"
            )
        return self._query_builder

    @property
    def id_mapper(self) -> IdentifierMapper:
        return self._id_mapper

    # -- queries -----------------------------------------------------------

    def create_cursor(
        self, filters: FilterSpec | Mapping[str, Any] | None = None
    ) -> QueryCursor:
        """Build an unexecuted cursor from ``filters``."""
        return self.query_builder.build(filters)

    async def find(
        self, filters: FilterSpec | Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Find documents matching ``filters``: query, search, sort, limit, offset."""
        return await self.create_cursor(filters).to_list()

    async def stream(
        self,
        filters: FilterSpec | Mapping[str, Any] | None = None,
        batch_size: int | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Like :meth:`find`, but yield documents as the driver returns them."""
        async for doc in self.create_cursor(filters).stream(batch_size):
            yield doc

    async def find_one(self, query: Mapping[str, Any]) -> dict[str, Any] | None:
        return await self.collection.find_one(dict(query))

    def _parse_id(self, _id: Any) -> Any:
        # string ids reach the store as native keys
        return self._id_mapper.codec.parse(_id)

    async def find_by_id(self, _id: Any) -> dict[str, Any] | None:
        return await self.collection.find_one({"_id": self._parse_id(_id)})

    async def find_by_ids(self, id_list: Iterable[Any]) -> list[dict[str, Any]]:
        cursor = self.collection.find(
            {"_id": {"$in": [self._parse_id(i) for i in id_list]}}
        )
        return [doc async for doc in cursor]

    async def count(
        self, filters: FilterSpec | Mapping[str, Any] | None = None
    ) -> int:
        """Count documents matching ``filters``; sort and pagination are ignored."""
        return await self.query_builder.count(filters).count()

    # -- writes ------------------------------------------------------------

    def _prepare(self, entity: Mapping[str, Any]) -> dict[str, Any]:
        if self._schema is not None:
            return validate_with_schema(self._schema, dict(entity))
        return dict(entity)

    async def insert(self, entity: Mapping[str, Any]) -> dict[str, Any]:
        """Insert one document and return it with its ``_id``."""
        doc = self._prepare(entity)
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.debug(
            "Inserted %r into %r", result.inserted_id, self._collection_name()
        )
        return doc

    async def insert_many(
        self, entities: Iterable[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        docs = [self._prepare(e) for e in entities]
        if not docs:
            return []
        result = await self.collection.insert_many(docs)
        for doc, inserted_id in zip(docs, result.inserted_ids):
            doc["_id"] = inserted_id
        logger.debug(
            "Inserted %d documents into %r", len(docs), self._collection_name()
        )
        return docs

    async def update_many(
        self, query: Mapping[str, Any], update: Mapping[str, Any]
    ) -> int:
        """Update matching documents; returns the number matched."""
        result = await self.collection.update_many(dict(query), _as_update(update))
        return int(result.matched_count)

    async def update_by_id(
        self, _id: Any, update: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        """Update one document and return it after the update."""
        return await self.collection.find_one_and_update(
            {"_id": self._parse_id(_id)},
            _as_update(update),
            return_document=ReturnDocument.AFTER,
        )

    async def remove_many(self, query: Mapping[str, Any]) -> int:
        result = await self.collection.delete_many(dict(query))
        return int(result.deleted_count)

    async def remove_by_id(self, _id: Any) -> dict[str, Any] | None:
        """Delete one document and return it as it was."""
        return await self.collection.find_one_and_delete(
            {"_id": self._parse_id(_id)}
        )

    async def clear(self) -> int:
        """Delete every document in the collection."""
        result = await self.collection.delete_many({})
        logger.debug(
            "Cleared %d documents from %r",
            result.deleted_count,
            self._collection_name(),
        )
        return int(result.deleted_count)

    # -- entity shaping ----------------------------------------------------

    def entity_to_object(self, entity: Mapping[str, Any]) -> dict[str, Any]:
        return entity_to_object(dict(entity))

    def before_save_transform_id(
        self, entity: Entity, id_field: str | None = None
    ) -> Entity:
        """Map the service id field to ``_id`` on a copy of ``entity``."""
        return self._id_mapper.to_internal(entity, id_field or self.id_field)

    def after_retrieve_transform_id(
        self, entity: Entity, id_field: str | None = None
    ) -> Entity:
        """Map ``_id`` to the service id field as a string."""
        return self._id_mapper.to_external(entity, id_field or self.id_field)
