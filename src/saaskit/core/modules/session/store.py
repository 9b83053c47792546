"""Persistence for session records."""

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from saaskit.core.modules.session.models import Session, SessionId
from saaskit.errors import StorageError


class SessionStore(Protocol):
    """Key-value persistence for sessions keyed by session id.

    Physical expiry is left to the backend and may lag `expires_at`;
    callers must check expiry themselves.
    """

    async def ensure_indexes(self) -> None: ...

    async def put(self, session: Session) -> None:
        """Insert or replace the full record."""
        ...

    async def get(self, session_id: SessionId) -> Session | None: ...

    async def delete(self, session_id: SessionId) -> None:
        """Delete the record. Deleting a missing id is not an error."""
        ...

    async def delete_by_user(self, user_id: UUID) -> int: ...

    async def touch(self, session_id: SessionId, timestamp: datetime) -> None:
        """Update last_activity_at only."""
        ...


class MongoSessionStore:
    """SessionStore backed by a MongoDB collection with a TTL index on expires_at."""

    def __init__(self, collection: AsyncCollection[dict[str, Any]]) -> None:
        self._collection = collection

    async def ensure_indexes(self) -> None:
        try:
            # Index for revoking all sessions of a user
            await self._collection.create_index([("user_id", 1)])
            # TTL index: MongoDB reaps documents once expires_at has passed
            await self._collection.create_index([("expires_at", 1)], expireAfterSeconds=0)
        except PyMongoError as e:
            raise StorageError(f"Failed to create session indexes: {e}") from e

    async def put(self, session: Session) -> None:
        try:
            await self._collection.replace_one({"_id": session.id}, session.to_mongo(), upsert=True)
        except PyMongoError as e:
            raise StorageError(f"Failed to write session: {e}") from e

    async def get(self, session_id: SessionId) -> Session | None:
        try:
            doc = await self._collection.find_one({"_id": session_id})
        except PyMongoError as e:
            raise StorageError(f"Failed to read session: {e}") from e
        if doc is None:
            return None
        return Session.model_validate(doc)

    async def delete(self, session_id: SessionId) -> None:
        try:
            await self._collection.delete_one({"_id": session_id})
        except PyMongoError as e:
            raise StorageError(f"Failed to delete session: {e}") from e

    async def delete_by_user(self, user_id: UUID) -> int:
        try:
            result = await self._collection.delete_many({"user_id": user_id})
        except PyMongoError as e:
            raise StorageError(f"Failed to delete user sessions: {e}") from e
        return result.deleted_count

    async def touch(self, session_id: SessionId, timestamp: datetime) -> None:
        try:
            await self._collection.update_one({"_id": session_id}, {"$set": {"last_activity_at": timestamp}})
        except PyMongoError as e:
            raise StorageError(f"Failed to update session activity: {e}") from e
