"""MongoConnectionManager — Motor client lifecycle, health check, disconnect log."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pymongo import monitoring

from .exceptions import MongoConnectionError

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

logger = logging.getLogger("mongo_db_adapter.connection")


class HeartbeatLogger(monitoring.ServerHeartbeatListener):
    """Log when a server stops (and resumes) answering heartbeats."""

    def __init__(self) -> None:
        self._lost: set[Any] = set()
        self._seen: set[Any] = set()

    def started(self, event: monitoring.ServerHeartbeatStartedEvent) -> None:
        pass

    def succeeded(self, event: monitoring.ServerHeartbeatSucceededEvent) -> None:
        if event.connection_id in self._lost:
            self._lost.discard(event.connection_id)
            logger.info("Reconnected to MongoDB at %s:%s.", *event.connection_id)
        self._seen.add(event.connection_id)

    def failed(self, event: monitoring.ServerHeartbeatFailedEvent) -> None:
        if event.connection_id in self._seen and event.connection_id not in self._lost:
            self._lost.add(event.connection_id)
            logger.warning("Disconnected from MongoDB.")


class MongoConnectionManager:
    """Wrap Motor client with lifecycle and health-check helpers."""

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        *,
        database: str | None = None,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 10000,
        **kwargs: Any,
    ) -> None:
        self._url = url
        self._database = database
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._connect_timeout_ms = connect_timeout_ms
        self._kwargs = kwargs
        self._client: AsyncIOMotorClient[Any] | None = None

    async def connect(self) -> AsyncIOMotorClient[Any]:
        """Create and cache the Motor client. Idempotent."""
        if self._client is not None:
            return self._client
        try:
            from motor.motor_asyncio import AsyncIOMotorClient
        except ImportError as e:
            raise MongoConnectionError(
                "motor is required; install with motor>=3.3.0"
            ) from e
        kwargs = dict(self._kwargs)
        listeners = [*kwargs.pop("event_listeners", []), HeartbeatLogger()]
        try:
            self._client = AsyncIOMotorClient(
                self._url,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
                connectTimeoutMS=self._connect_timeout_ms,
                event_listeners=listeners,
                **kwargs,
            )
        except Exception as e:
            raise MongoConnectionError(str(e)) from e
        logger.info("Connected to MongoDB.")
        return self._client

    @property
    def client(self) -> AsyncIOMotorClient[Any]:
        """Return the Motor client; raises if not connected."""
        if self._client is None:
            raise MongoConnectionError("Not connected; call connect() first")
        return self._client

    @property
    def database_name(self) -> str | None:
        return self._database

    def get_database(self, name: str | None = None) -> AsyncIOMotorDatabase[Any]:
        """Return ``name``, else the configured database, else the URL's default."""
        return self.client.get_database(name or self._database)

    def close(self) -> None:
        """Close the client (synchronous; Motor client.close() is sync)."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Closed MongoDB connection.")

    async def health_check(self) -> bool:
        """Ping the server; return True if reachable."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except Exception:  # noqa: BLE001
            return False
