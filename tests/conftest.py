"""
Shared fixtures: environment defaults, an in-memory database that answers the
subset of the motor API the document store uses, and API clients.
"""

import copy
import os
from types import SimpleNamespace

import bson
import pytest
from bson import ObjectId
from bson.codec_options import CodecOptions
from pymongo.errors import ServerSelectionTimeoutError, WriteError

os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGO_DB_NAME", "hospital_test")
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("API_KEYS", "test-key:tester,second-key:nurse")
os.environ.setdefault("LOG_FORMAT", "text")

from fastapi.testclient import TestClient  # noqa: E402

from hospitalrecords.adapters.db.mongo.store import DocumentStore, get_document_store  # noqa: E402
from hospitalrecords.app import create_app  # noqa: E402
from hospitalrecords.core.auth import reset_auth_service  # noqa: E402

API_KEY = "test-key"

# Same decoding the store's client uses (tz_aware=True)
STORE_CODEC = CodecOptions(tz_aware=True)


def store_shaped(document):
    """Encode and decode ``document`` the way a write then read through the driver would."""
    return bson.decode(bson.encode(document), codec_options=STORE_CODEC)


class InMemoryCursor:
    def __init__(self, documents):
        self._documents = documents

    def sort(self, key, direction=1):
        self._documents = sorted(
            self._documents, key=lambda doc: doc[key], reverse=direction < 0
        )
        return self

    async def to_list(self, length=None):
        return [copy.deepcopy(doc) for doc in self._documents[:length]]


class InMemoryCollection:
    def __init__(self, name):
        self.name = name
        self.documents = []

    def _match(self, query):
        return [
            doc for doc in self.documents
            if all(doc.get(key) == value for key, value in query.items())
        ]

    def find(self, query=None):
        return InMemoryCursor(self._match(query or {}))

    async def find_one(self, query):
        matches = self._match(query)
        return copy.deepcopy(matches[0]) if matches else None

    async def insert_one(self, document):
        document.setdefault("_id", ObjectId())
        self.documents.append(store_shaped(document))
        return SimpleNamespace(inserted_id=document["_id"], acknowledged=True)

    async def update_one(self, query, update):
        for key in update["$set"]:
            # mongod refuses these paths inside $set
            if not key or key.startswith("$") or key.split(".", 1)[0] == "_id":
                raise WriteError(f"Invalid update path {key!r}", code=52)
        matches = self._match(query)
        if not matches:
            return SimpleNamespace(matched_count=0, modified_count=0)
        target = matches[0]
        before = copy.deepcopy(target)
        target.update(store_shaped(update["$set"]))
        return SimpleNamespace(matched_count=1, modified_count=int(before != target))

    async def delete_one(self, query):
        matches = self._match(query)
        if not matches:
            return SimpleNamespace(deleted_count=0)
        self.documents.remove(matches[0])
        return SimpleNamespace(deleted_count=1)


class InMemoryDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = InMemoryCollection(name)
        return self.collections[name]

    async def command(self, name):
        return {"ok": 1.0}


class UnreachableCollection:
    """Collection whose every call fails the way an unreachable server does."""

    name = "unreachable"

    def find(self, query=None):
        raise ServerSelectionTimeoutError("No servers available")

    async def find_one(self, query):
        raise ServerSelectionTimeoutError("No servers available")

    async def insert_one(self, document):
        raise ServerSelectionTimeoutError("No servers available")

    async def update_one(self, query, update):
        raise ServerSelectionTimeoutError("No servers available")

    async def delete_one(self, query):
        raise ServerSelectionTimeoutError("No servers available")


class UnreachableDatabase:
    def __getitem__(self, name):
        return UnreachableCollection()

    async def command(self, name):
        raise ServerSelectionTimeoutError("No servers available")


@pytest.fixture
def database():
    return InMemoryDatabase()


@pytest.fixture
def store(database):
    document_store = DocumentStore()
    document_store.bind(database)
    return document_store


def _build_app(document_store):
    reset_auth_service()
    application = create_app()
    application.dependency_overrides[get_document_store] = lambda: document_store
    return application


@pytest.fixture
def app(store):
    return _build_app(store)


@pytest.fixture
def client(app):
    """Anonymous client: no session."""
    return TestClient(app)


@pytest.fixture
def auth_client(app):
    """Client holding a logged-in session."""
    test_client = TestClient(app)
    response = test_client.post("/auth/login", json={"apiKey": API_KEY})
    assert response.status_code == 200
    return test_client


@pytest.fixture
def broken_store():
    """Store bound to a database that fails on every call."""
    document_store = DocumentStore()
    document_store.bind(UnreachableDatabase())
    return document_store


@pytest.fixture
def broken_client(broken_store):
    """Logged-in client whose store fails on every call."""
    test_client = TestClient(_build_app(broken_store), raise_server_exceptions=False)
    response = test_client.post("/auth/login", json={"apiKey": API_KEY})
    assert response.status_code == 200
    return test_client


@pytest.fixture
def unbound_client():
    """Client for an app whose store was never connected."""
    return TestClient(_build_app(DocumentStore()), raise_server_exceptions=False)
