"""MongoDB adapter for service CRUD.

Translates store-agnostic filters into MongoDB queries and maps between
MongoDB's ``_id`` and a service-chosen identifier field.
"""

from __future__ import annotations

from .adapter import MongoDbAdapter, ServiceSchema
from .connection import HeartbeatLogger, MongoConnectionManager
from .cursor import CountCursor, QueryCursor
from .exceptions import (
    ConfigurationError,
    EntityValidationError,
    InvalidIdentifier,
    MongoAdapterError,
    MongoConnectionError,
    MongoPersistenceError,
    MongoQueryError,
)
from .filters import FilterSpec
from .id_mapper import NATIVE_KEY, IdentifierMapper
from .keys import KeyCodec, ObjectIdCodec, StringKeyCodec, codec_for, key_to_string
from .query_builder import MongoQueryBuilder, parse_sort
from .serialization import entity_to_object
from .settings import MongoAdapterSettings

__all__ = [
    # Core
    "FilterSpec",
    "MongoQueryBuilder",
    "QueryCursor",
    "CountCursor",
    "IdentifierMapper",
    "NATIVE_KEY",
    "KeyCodec",
    "ObjectIdCodec",
    "StringKeyCodec",
    # Adapter
    "MongoDbAdapter",
    "ServiceSchema",
    "MongoConnectionManager",
    "HeartbeatLogger",
    "MongoAdapterSettings",
    # Utilities
    "parse_sort",
    "codec_for",
    "key_to_string",
    "entity_to_object",
    # Exceptions
    "MongoAdapterError",
    "ConfigurationError",
    "InvalidIdentifier",
    "MongoPersistenceError",
    "MongoConnectionError",
    "MongoQueryError",
    "EntityValidationError",
]
