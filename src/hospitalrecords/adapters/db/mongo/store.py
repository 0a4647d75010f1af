"""
MongoDB document store gateway.

One ``DocumentStore`` exists per process. It is bound to a database during the
application lifespan, before any request is served, and only read afterwards.
Collections are reached through ``CollectionRef`` wrappers that expose the five
basic operations the resource handlers need.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from ....domain.errors import StoreConnectionError, StoreNotInitializedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateOutcome:
    """Result of an update-by-id."""

    matched: int
    modified: int


@dataclass(frozen=True)
class DeleteOutcome:
    """Result of a delete-by-id."""

    deleted: int


class CollectionRef:
    """Thin accessor over one named collection."""

    def __init__(self, collection: Any):
        self._collection = collection

    @property
    def name(self) -> str:
        return self._collection.name

    async def list_all(self) -> List[Dict[str, Any]]:
        """Return every document in insertion order."""
        cursor = self._collection.find({}).sort("_id", ASCENDING)
        return await cursor.to_list(length=None)

    async def find_by_id(self, document_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self._collection.find_one({"_id": document_id})

    async def insert(self, document: Dict[str, Any]) -> ObjectId:
        result = await self._collection.insert_one(document)
        return result.inserted_id

    async def update_by_id(self, document_id: ObjectId, patch: Dict[str, Any]) -> UpdateOutcome:
        result = await self._collection.update_one({"_id": document_id}, {"$set": patch})
        return UpdateOutcome(matched=result.matched_count, modified=result.modified_count)

    async def delete_by_id(self, document_id: ObjectId) -> DeleteOutcome:
        result = await self._collection.delete_one({"_id": document_id})
        return DeleteOutcome(deleted=result.deleted_count)


class DocumentStore:
    """Owns the single live database connection for the process."""

    def __init__(self):
        self._client = None
        self._db = None

    @property
    def is_connected(self) -> bool:
        return self._db is not None

    @property
    def handle(self):
        """The bound database; fails explicitly before startup has connected."""
        if self._db is None:
            raise StoreNotInitializedError()
        return self._db

    def bind(self, database: Any, client: Any = None) -> None:
        """Attach an open database handle. The handle is never reassigned."""
        if self._db is not None:
            raise RuntimeError("Document store is already bound")
        self._db = database
        self._client = client

    async def connect(self, uri: str, db_name: str, server_selection_timeout_ms: int = 15000) -> None:
        """Open the client, verify the server answers, and bind the database."""
        from motor.motor_asyncio import AsyncIOMotorClient

        # Enable TLS only for Atlas SRV URIs
        if uri.startswith("mongodb+srv://"):
            import certifi

            client = AsyncIOMotorClient(
                uri,
                serverSelectionTimeoutMS=server_selection_timeout_ms,
                tz_aware=True,
                tls=True,
                tlsCAFile=certifi.where(),
                tlsAllowInvalidCertificates=False,
            )
        else:
            # Local/standard connection (no TLS)
            client = AsyncIOMotorClient(
                uri,
                serverSelectionTimeoutMS=server_selection_timeout_ms,
                tz_aware=True,
            )

        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            client.close()
            raise StoreConnectionError(f"MongoDB connection failed: {e}") from e

        self.bind(client[db_name], client=client)
        logger.info(f"MongoDB connected (database={db_name})")

    def disconnect(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.info("Disconnected from MongoDB")
        self._client = None
        self._db = None

    def collection(self, name: str) -> CollectionRef:
        return CollectionRef(self.handle[name])


# Global instance
_document_store = DocumentStore()


def get_document_store() -> DocumentStore:
    """Get the process-wide document store (FastAPI dependency)."""
    return _document_store
