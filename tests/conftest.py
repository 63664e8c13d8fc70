"""Test configuration for the MongoDB adapter."""

import pytest

from mongo_db_adapter import MongoConnectionManager, MongoDbAdapter, ServiceSchema

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def mock_client():
    """Create a mock MongoDB client."""
    mongomock_motor = pytest.importorskip("mongomock_motor")
    return mongomock_motor.AsyncMongoMockClient(default_database_name="test_db")


@pytest.fixture
def mock_connection(mock_client):
    """Create a connection manager that already holds the mock client."""
    connection = MongoConnectionManager(url="mongodb://mock:27017", database="test_db")
    connection._client = mock_client

    async def _mock_connect():
        return connection._client

    connection.connect = _mock_connect
    return connection


@pytest.fixture
def collection(mock_connection):
    """The collection every adapter test writes to."""
    return mock_connection.get_database().get_collection("test_entities")


@pytest.fixture
async def adapter(collection):
    """Adapter bound to a pre-built collection handle."""
    adapter = MongoDbAdapter()
    adapter.init(ServiceSchema(model=collection))
    await adapter.connect()
    yield adapter
    await adapter.clear()
