from typing import Any
from uuid import UUID

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from saaskit.core.core import Service
from saaskit.core.modules.user.models import ProfileUpdate, User
from saaskit.errors import NotFoundError, ValidationError
from saaskit.utils import now

logger = structlog.get_logger(__name__)


class UserService(Service):
    """User directory stored in the `users` collection."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__()
        self._collection = database.get_collection("users")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("email", 1)], unique=True)
        await self._collection.create_index([("billing_customer_id", 1)], sparse=True)
        logger.debug("user_service_started")

    async def find_by_id(self, user_id: UUID) -> User | None:
        doc = await self._collection.find_one({"_id": user_id})
        if doc is None:
            return None
        return User.model_validate(doc)

    async def get_user(self, user_id: UUID) -> User:
        """Get user by ID. Raises NotFoundError if missing."""
        user = await self.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def find_by_email(self, email: str) -> User | None:
        doc = await self._collection.find_one({"email": email.lower()})
        if doc is None:
            return None
        return User.model_validate(doc)

    async def find_by_billing_customer_id(self, customer_id: str) -> User | None:
        doc = await self._collection.find_one({"billing_customer_id": customer_id})
        if doc is None:
            return None
        return User.model_validate(doc)

    async def create_user(
        self,
        email: str,
        google_id: str,
        name: str,
        given_name: str | None = None,
        family_name: str | None = None,
        profile_picture: str | None = None,
    ) -> User:
        if await self.find_by_email(email) is not None:
            raise ValidationError(f"User '{email}' already exists")

        user = User(
            email=email.lower(),
            google_id=google_id,
            name=name,
            given_name=given_name,
            family_name=family_name,
            profile_picture=profile_picture,
        )
        await self._collection.insert_one(user.to_mongo())
        logger.info("user_created", user_id=user.id)
        return user

    async def update_profile(self, user_id: UUID, update: ProfileUpdate) -> User:
        """Apply a partial profile update. Unset fields are left unchanged."""
        changes = update.model_dump(exclude_none=True)
        if not changes:
            return await self.get_user(user_id)
        return await self._update(user_id, changes)

    async def set_billing_customer_id(self, user_id: UUID, customer_id: str) -> User:
        return await self._update(user_id, {"billing_customer_id": customer_id})

    async def delete_user(self, user_id: UUID) -> None:
        result = await self._collection.delete_one({"_id": user_id})
        if result.deleted_count == 0:
            raise NotFoundError("User not found")
        logger.info("user_deleted", user_id=user_id)

    async def _update(self, user_id: UUID, changes: dict[str, Any]) -> User:
        doc = await self._collection.find_one_and_update(
            {"_id": user_id},
            {"$set": {**changes, "updated_at": now()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("User not found")
        return User.model_validate(doc)
