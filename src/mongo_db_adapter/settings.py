"""Adapter configuration and explicit wiring of its collaborators."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

from .adapter import MongoDbAdapter, ServiceSchema
from .connection import MongoConnectionManager
from .exceptions import ConfigurationError
from .keys import codec_for

if TYPE_CHECKING:
    from pydantic import BaseModel


@dataclass(frozen=True)
class MongoAdapterSettings:
    """
    Immutable adapter configuration.

    Attributes:
        url: MongoDB connection string.
        database: Database name; ``None`` uses the default from ``url``.
        collection: Collection the service stores its entities in.
        id_field: Field name callers use for the identifier.
        key_type: ``"objectid"`` or ``"string"``; selects the key codec.
    """

    url: str = "mongodb://localhost:27017"
    database: str | None = None
    collection: str | None = None
    id_field: str = "_id"
    key_type: str = "objectid"
    server_selection_timeout_ms: int = 5000
    connect_timeout_ms: int = 10000

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> MongoAdapterSettings:
        """Build settings from a plain config mapping; unknown keys are an error."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown adapter settings: {', '.join(unknown)}")
        return cls(**dict(data))

    def build_connection(self) -> MongoConnectionManager:
        return MongoConnectionManager(
            self.url,
            database=self.database,
            server_selection_timeout_ms=self.server_selection_timeout_ms,
            connect_timeout_ms=self.connect_timeout_ms,
        )

    def build_adapter(
        self,
        schema: type[BaseModel],
        connection: MongoConnectionManager | None = None,
    ) -> MongoDbAdapter:
        """Create and initialise an adapter storing ``schema`` in ``collection``."""
        adapter = MongoDbAdapter(
            connection or self.build_connection(),
            id_field=self.id_field,
            key_codec=codec_for(self.key_type),
        )
        adapter.init(ServiceSchema(schema=schema, model_name=self.collection))
        return adapter
