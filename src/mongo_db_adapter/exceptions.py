"""Exceptions raised by the MongoDB adapter."""

from __future__ import annotations

from typing import Any


class MongoAdapterError(Exception):
    """Root exception for the adapter."""


class ConfigurationError(MongoAdapterError):
    """Raised at setup when the adapter is wired up incorrectly."""


class InvalidIdentifier(MongoAdapterError, ValueError):
    """Raised when an external identifier cannot be parsed into a native key."""

    def __init__(self, value: Any, reason: str | None = None) -> None:
        self.value = value
        self.reason = reason
        msg = f"Invalid identifier {value!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class MongoPersistenceError(MongoAdapterError):
    """Base for MongoDB persistence errors."""


class MongoConnectionError(MongoPersistenceError):
    """Raised when connection to MongoDB fails."""


class MongoQueryError(MongoPersistenceError):
    """Raised when a filter cannot be turned into a query."""


class EntityValidationError(MongoPersistenceError):
    """Raised when an entity does not validate against the service schema."""
