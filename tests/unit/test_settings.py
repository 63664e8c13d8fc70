"""Unit tests for MongoAdapterSettings wiring."""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from mongo_db_adapter import (
    ConfigurationError,
    MongoAdapterSettings,
    MongoConnectionManager,
    StringKeyCodec,
)


class SampleUser(BaseModel):
    name: str


def test_from_mapping() -> None:
    settings = MongoAdapterSettings.from_mapping(
        {"url": "mongodb://db:27017", "database": "app", "collection": "users"}
    )
    assert settings.url == "mongodb://db:27017"
    assert settings.database == "app"
    assert settings.id_field == "_id"


def test_from_mapping_rejects_unknown_keys() -> None:
    with pytest.raises(ConfigurationError, match="uri"):
        MongoAdapterSettings.from_mapping({"uri": "mongodb://db"})


def test_build_connection() -> None:
    settings = MongoAdapterSettings(database="app", connect_timeout_ms=50)
    connection = settings.build_connection()
    assert isinstance(connection, MongoConnectionManager)
    assert connection.database_name == "app"


def test_build_adapter_uses_key_type() -> None:
    settings = MongoAdapterSettings(collection="users", key_type="string")
    adapter = settings.build_adapter(SampleUser)
    assert isinstance(adapter.id_mapper.codec, StringKeyCodec)


def test_build_adapter_requires_collection() -> None:
    with pytest.raises(ConfigurationError, match="model_name"):
        MongoAdapterSettings().build_adapter(SampleUser)


def test_build_adapter_rejects_unknown_key_type() -> None:
    settings = MongoAdapterSettings(collection="users", key_type="int")
    with pytest.raises(ConfigurationError, match="Unknown key type"):
        settings.build_adapter(SampleUser)


def test_build_adapter_uses_id_field() -> None:
    settings = MongoAdapterSettings(collection="users", id_field="id")
    adapter = settings.build_adapter(SampleUser)
    assert adapter.id_field == "id"
    assert adapter.before_save_transform_id({"id": None, "name": "a"}) == {"name": "a"}
