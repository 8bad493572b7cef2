from typing import Any, Protocol

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import CollectionInvalid, DuplicateKeyError, PyMongoError

from sessiongate.core.modules.session.hashing import SECRET_HASH_LENGTH
from sessiongate.core.modules.session.models import Session
from sessiongate.errors import CorruptSessionError, DuplicateIdError, StoreUnavailableError

logger = structlog.get_logger(__name__)

SESSIONS_COLLECTION = "sessions"

# Mirrors session(id TEXT PRIMARY KEY, secret_hash BLOB NOT NULL, created_at INTEGER NOT NULL)
SESSION_SCHEMA: dict[str, Any] = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["_id", "secret_hash", "created_at"],
        "properties": {
            "_id": {"bsonType": "string"},
            "secret_hash": {"bsonType": "binData"},
            "created_at": {"bsonType": ["int", "long"]},
        },
    }
}


class SessionStore(Protocol):
    """Persistence boundary for sessions, keyed by session id."""

    async def ensure_schema(self) -> None: ...

    async def insert(self, session: Session) -> None: ...

    async def fetch_by_id(self, session_id: str) -> Session | None: ...

    async def delete_by_id(self, session_id: str) -> None: ...


def check_secret_hash(session_id: str, secret_hash: bytes) -> None:
    """Raise CorruptSessionError when a stored hash has the wrong length."""
    if len(secret_hash) != SECRET_HASH_LENGTH:
        raise CorruptSessionError(
            f"Session '{session_id}' has a {len(secret_hash)}-byte secret hash, expected {SECRET_HASH_LENGTH}"
        )


class MongoSessionStore:
    """Session store backed by a MongoDB collection."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]], collection_name: str = SESSIONS_COLLECTION) -> None:
        self._database = database
        self._collection_name = collection_name
        self._collection = database.get_collection(collection_name)

    async def ensure_schema(self) -> None:
        """Create the sessions collection with its validator if it does not exist yet."""
        try:
            if self._collection_name in await self._database.list_collection_names():
                return
            await self._database.create_collection(self._collection_name, validator=SESSION_SCHEMA)
            logger.info("session_collection_created", collection=self._collection_name)
        except CollectionInvalid:
            # Created concurrently by another process
            pass
        except PyMongoError as e:
            raise StoreUnavailableError("Failed to create sessions collection") from e

    async def insert(self, session: Session) -> None:
        check_secret_hash(session.id, session.secret_hash)
        try:
            await self._collection.insert_one(session.to_mongo())
        except DuplicateKeyError as e:
            raise DuplicateIdError(f"Session '{session.id}' already exists") from e
        except PyMongoError as e:
            logger.warning("session_store_unavailable", operation="insert", error=str(e))
            raise StoreUnavailableError("Failed to insert session") from e

    async def fetch_by_id(self, session_id: str) -> Session | None:
        try:
            document = await self._collection.find_one({"_id": session_id})
        except PyMongoError as e:
            logger.warning("session_store_unavailable", operation="fetch", error=str(e))
            raise StoreUnavailableError("Failed to fetch session") from e
        if document is None:
            return None

        try:
            session = Session.from_mongo(document)
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptSessionError(f"Session '{session_id}' has an invalid document") from e
        check_secret_hash(session.id, session.secret_hash)
        return session

    async def delete_by_id(self, session_id: str) -> None:
        try:
            await self._collection.delete_one({"_id": session_id})
        except PyMongoError as e:
            logger.warning("session_store_unavailable", operation="delete", error=str(e))
            raise StoreUnavailableError("Failed to delete session") from e
