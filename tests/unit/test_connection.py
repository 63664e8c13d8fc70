"""Unit tests for MongoConnectionManager (without real MongoDB)."""

from __future__ import annotations

import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from mongo_db_adapter.connection import HeartbeatLogger, MongoConnectionManager
from mongo_db_adapter.exceptions import MongoConnectionError

SERVER = ("localhost", 27017)


@pytest.fixture
def motor_client(monkeypatch):
    """Replace AsyncIOMotorClient with a recording mock."""
    import motor.motor_asyncio

    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    factory = MagicMock(return_value=client)
    monkeypatch.setattr(motor.motor_asyncio, "AsyncIOMotorClient", factory)
    return factory


def test_client_raises_before_connect() -> None:
    mgr = MongoConnectionManager(url="mongodb://localhost:27017")
    with pytest.raises(MongoConnectionError, match="Not connected"):
        _ = mgr.client


def test_close_idempotent() -> None:
    mgr = MongoConnectionManager()
    mgr.close()  # sync; idempotent when not connected
    mgr.close()


class TestConnect:
    @pytest.mark.asyncio
    async def test_connect_passes_options(self, motor_client) -> None:
        mgr = MongoConnectionManager(
            "mongodb://db:27017",
            server_selection_timeout_ms=100,
            connect_timeout_ms=200,
            appname="svc",
        )

        await mgr.connect()

        args, kwargs = motor_client.call_args
        assert args == ("mongodb://db:27017",)
        assert kwargs["serverSelectionTimeoutMS"] == 100
        assert kwargs["connectTimeoutMS"] == 200
        assert kwargs["appname"] == "svc"
        assert any(isinstance(x, HeartbeatLogger) for x in kwargs["event_listeners"])

    @pytest.mark.asyncio
    async def test_connect_keeps_caller_listeners(self, motor_client) -> None:
        listener = object()
        mgr = MongoConnectionManager(event_listeners=[listener])

        await mgr.connect()
        mgr.close()
        await mgr.connect()

        listeners = motor_client.call_args.kwargs["event_listeners"]
        assert listeners[0] is listener
        assert len(listeners) == 2

    @pytest.mark.asyncio
    async def test_multiple_connect_calls(self, motor_client) -> None:
        mgr = MongoConnectionManager()
        first = await mgr.connect()
        second = await mgr.connect()
        assert first is second
        assert motor_client.call_count == 1

    @pytest.mark.asyncio
    async def test_client_errors_are_wrapped(self, motor_client) -> None:
        motor_client.side_effect = ValueError("bad uri")
        mgr = MongoConnectionManager("not-a-uri")
        with pytest.raises(MongoConnectionError, match="bad uri"):
            await mgr.connect()

    @pytest.mark.asyncio
    async def test_get_database_uses_configured_name(self, motor_client) -> None:
        mgr = MongoConnectionManager(database="app")
        client = await mgr.connect()

        mgr.get_database()
        mgr.get_database("other")

        assert [c.args for c in client.get_database.call_args_list] == [
            ("app",),
            ("other",),
        ]

    @pytest.mark.asyncio
    async def test_close_releases_client(self, motor_client) -> None:
        mgr = MongoConnectionManager()
        client = await mgr.connect()
        mgr.close()
        client.close.assert_called_once_with()
        with pytest.raises(MongoConnectionError):
            _ = mgr.client


class TestHealthCheck:
    @pytest.mark.asyncio
    async def test_not_connected(self) -> None:
        assert await MongoConnectionManager().health_check() is False

    @pytest.mark.asyncio
    async def test_ping_ok(self, motor_client) -> None:
        mgr = MongoConnectionManager()
        await mgr.connect()
        assert await mgr.health_check() is True

    @pytest.mark.asyncio
    async def test_ping_fails(self, motor_client) -> None:
        mgr = MongoConnectionManager()
        client = await mgr.connect()
        client.admin.command = AsyncMock(side_effect=RuntimeError("down"))
        assert await mgr.health_check() is False


class TestHeartbeatLogger:
    def test_logs_disconnect_once_after_success(self, caplog) -> None:
        listener = HeartbeatLogger()
        event = SimpleNamespace(connection_id=SERVER)

        with caplog.at_level(logging.INFO, logger="mongo_db_adapter.connection"):
            listener.succeeded(event)
            listener.failed(event)
            listener.failed(event)
            listener.succeeded(event)

        messages = [r.getMessage() for r in caplog.records]
        assert messages.count("Disconnected from MongoDB.") == 1
        assert "Reconnected to MongoDB at localhost:27017." in messages
        warning = next(r for r in caplog.records if "Disconnected" in r.getMessage())
        assert warning.levelno == logging.WARNING

    def test_initial_failures_are_not_disconnects(self, caplog) -> None:
        listener = HeartbeatLogger()
        with caplog.at_level(logging.INFO, logger="mongo_db_adapter.connection"):
            listener.failed(SimpleNamespace(connection_id=SERVER))
        assert caplog.records == []
