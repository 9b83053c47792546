"""Tests for the MongoDB session store."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from pymongo.errors import AutoReconnect, PyMongoError

from saaskit.core.modules.session.models import IdentitySnapshot, Session, SessionId
from saaskit.core.modules.session.store import MongoSessionStore
from saaskit.errors import StorageError
from saaskit.utils import now


@pytest.fixture
def collection():
    return AsyncMock()


@pytest.fixture
def mongo_store(collection):
    return MongoSessionStore(collection)


@pytest.fixture
def session():
    return Session.start(IdentitySnapshot(user_id=uuid4(), user_email="ada@example.com", user_name="Ada"))


class TestIndexes:
    async def test_ttl_on_expires_at_and_user_index(self, mongo_store, collection):
        await mongo_store.ensure_indexes()

        collection.create_index.assert_any_await([("expires_at", 1)], expireAfterSeconds=0)
        collection.create_index.assert_any_await([("user_id", 1)])


class TestOperations:
    async def test_put_replaces_whole_record(self, mongo_store, collection, session):
        await mongo_store.put(session)

        collection.replace_one.assert_awaited_once_with({"_id": session.id}, session.to_mongo(), upsert=True)

    async def test_get_validates_document(self, mongo_store, collection, session):
        collection.find_one.return_value = session.to_mongo()

        assert await mongo_store.get(session.id) == session
        collection.find_one.assert_awaited_once_with({"_id": session.id})

    async def test_get_missing(self, mongo_store, collection):
        collection.find_one.return_value = None

        assert await mongo_store.get(SessionId("0" * 44)) is None

    async def test_delete_missing_is_not_an_error(self, mongo_store, collection):
        collection.delete_one.return_value = MagicMock(deleted_count=0)

        await mongo_store.delete(SessionId("0" * 44))

        collection.delete_one.assert_awaited_once_with({"_id": "0" * 44})

    async def test_delete_by_user_returns_count(self, mongo_store, collection):
        user_id = uuid4()
        collection.delete_many.return_value = MagicMock(deleted_count=3)

        assert await mongo_store.delete_by_user(user_id) == 3
        collection.delete_many.assert_awaited_once_with({"user_id": user_id})

    async def test_touch_sets_only_last_activity(self, mongo_store, collection, session):
        timestamp = now()

        await mongo_store.touch(session.id, timestamp)

        collection.update_one.assert_awaited_once_with({"_id": session.id}, {"$set": {"last_activity_at": timestamp}})


class TestErrors:
    @pytest.mark.parametrize(
        ("method", "call"),
        [
            ("create_index", lambda store, session: store.ensure_indexes()),
            ("replace_one", lambda store, session: store.put(session)),
            ("find_one", lambda store, session: store.get(session.id)),
            ("delete_one", lambda store, session: store.delete(session.id)),
            ("delete_many", lambda store, session: store.delete_by_user(session.user_id)),
            ("update_one", lambda store, session: store.touch(session.id, now())),
        ],
    )
    async def test_driver_errors_become_storage_errors(self, mongo_store, collection, session, method, call):
        getattr(collection, method).side_effect = AutoReconnect("connection reset")

        with pytest.raises(StorageError) as exc_info:
            await call(mongo_store, session)

        assert isinstance(exc_info.value.__cause__, PyMongoError)
