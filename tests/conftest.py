"""Shared pytest fixtures."""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError, NetworkTimeout

from meetmogger.app import App
from meetmogger.config import Config
from meetmogger.core.core import Core
from meetmogger.web.server import create_fastapi_app


def _matches(document: dict[str, Any], query: dict[str, Any]) -> bool:
    for key, value in query.items():
        if key == "$or":
            if not any(_matches(document, sub) for sub in value):
                return False
        elif document.get(key) != value:
            return False
    return True


class FakeCollection:
    """In-memory collection honoring unique single-field indexes like mongod does."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.documents: list[dict[str, Any]] = []
        self.indexes: list[tuple[list[tuple[str, int]], bool]] = []
        self.fail_with: Exception | None = None

    @property
    def unique_fields(self) -> list[str]:
        return [keys[0][0] for keys, unique in self.indexes if unique]

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def create_index(self, keys: list[tuple[str, int]], unique: bool = False, **_: Any) -> str:
        self.indexes.append((keys, unique))
        return "_".join(f"{field}_{direction}" for field, direction in keys)

    async def insert_one(self, document: dict[str, Any]) -> SimpleNamespace:
        self._maybe_fail()
        for field in self.unique_fields:
            if any(doc.get(field) == document.get(field) for doc in self.documents):
                raise DuplicateKeyError(
                    f"E11000 duplicate key error collection: test.{self.name} index: {field}_1",
                    code=11000,
                    details={"keyPattern": {field: 1}, "keyValue": {field: document.get(field)}},
                )
        self.documents.append(dict(document))
        return SimpleNamespace(inserted_id=document.get("_id"))

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        self._maybe_fail()
        return next((dict(doc) for doc in self.documents if _matches(doc, query)), None)


class FakeDatabase:
    def __init__(self, name: str) -> None:
        self.name = name
        self.collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection(name))


class FakeMongoClient:
    def __init__(self) -> None:
        self.databases: dict[str, FakeDatabase] = {}
        self.closed = False

    def get_database(self, name: str) -> FakeDatabase:
        return self.databases.setdefault(name, FakeDatabase(name))

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    """Injectable clock; starts at the real current time and only moves when advanced."""

    def __init__(self) -> None:
        self.current = datetime.now(UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current += delta


@pytest.fixture
def config():
    """Test configuration: fast bcrypt, explicit secret, fake LLM key."""
    return Config(
        database_url="mongodb://localhost:27017/meetmogger_test",
        jwt_secret="test-secret-for-unit-tests",
        bcrypt_rounds=4,
        llm_api_key="test-llm-key",
        analysis_max_transcript_chars=1000,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mongo_client():
    return FakeMongoClient()


@pytest.fixture
def database(mongo_client):
    return mongo_client.get_database("meetmogger_test")


@pytest.fixture
def users_collection(database):
    return database.get_collection("users")


@pytest.fixture
def analysis_logs_collection(database):
    return database.get_collection("analysis_logs")


@pytest.fixture
def store_timeout():
    return NetworkTimeout("timed out after 10000ms")


@pytest.fixture
async def core(config, mongo_client, clock):
    """Started core wired to the in-memory database."""
    core = Core(config, mongo_client, clock)
    await core.on_start()
    return core


@pytest.fixture
def client(config, mongo_client, clock):
    """HTTP client running the full FastAPI app (lifespan included)."""
    app = App(config, mongo_client, clock)
    with TestClient(create_fastapi_app(app, config)) as test_client:
        yield test_client
