"""Shared pytest fixtures."""

from datetime import datetime
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from saaskit.app import App
from saaskit.config import Config
from saaskit.core.core import Service
from saaskit.core.modules.session.models import IdentitySnapshot, Session, SessionId
from saaskit.core.modules.session.service import SessionService
from saaskit.core.modules.user.models import ProfileUpdate, User
from saaskit.errors import NotFoundError, StorageError, ValidationError
from saaskit.utils import now
from saaskit.web.server import create_fastapi_app


class InMemorySessionStore:
    """Session store kept in a dict, with call counters and failure switches."""

    def __init__(self) -> None:
        self.records: dict[str, Session] = {}
        self.calls: dict[str, int] = {"put": 0, "get": 0, "delete": 0, "delete_by_user": 0, "touch": 0}
        self.fail_reads = False
        self.fail_writes = False
        self.fail_touch = False

    async def ensure_indexes(self) -> None:
        pass

    async def put(self, session: Session) -> None:
        self.calls["put"] += 1
        if self.fail_writes:
            raise StorageError("store unavailable")
        self.records[session.id] = session.model_copy()

    async def get(self, session_id: SessionId) -> Session | None:
        self.calls["get"] += 1
        if self.fail_reads:
            raise StorageError("store unavailable")
        session = self.records.get(session_id)
        return session.model_copy() if session else None

    async def delete(self, session_id: SessionId) -> None:
        self.calls["delete"] += 1
        if self.fail_writes:
            raise StorageError("store unavailable")
        self.records.pop(session_id, None)

    async def delete_by_user(self, user_id: UUID) -> int:
        self.calls["delete_by_user"] += 1
        if self.fail_writes:
            raise StorageError("store unavailable")
        doomed = [sid for sid, session in self.records.items() if session.user_id == user_id]
        for sid in doomed:
            del self.records[sid]
        return len(doomed)

    async def touch(self, session_id: SessionId, timestamp: datetime) -> None:
        self.calls["touch"] += 1
        if self.fail_touch:
            raise StorageError("store unavailable")
        session = self.records.get(session_id)
        if session is not None:
            self.records[session_id] = session.model_copy(update={"last_activity_at": timestamp})


class InMemoryUserService(Service):
    """User directory kept in a dict."""

    def __init__(self) -> None:
        super().__init__()
        self.users: dict[UUID, User] = {}

    def add(self, email: str = "ada@example.com", name: str = "Ada", billing_customer_id: str | None = None) -> User:
        user = User(email=email, google_id=f"g-{uuid4().hex[:8]}", name=name, billing_customer_id=billing_customer_id)
        self.users[user.id] = user
        return user

    async def find_by_id(self, user_id: UUID) -> User | None:
        return self.users.get(user_id)

    async def get_user(self, user_id: UUID) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def find_by_email(self, email: str) -> User | None:
        return next((user for user in self.users.values() if user.email == email.lower()), None)

    async def find_by_billing_customer_id(self, customer_id: str) -> User | None:
        return next((user for user in self.users.values() if user.billing_customer_id == customer_id), None)

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
        self.users[user.id] = user
        return user

    async def update_profile(self, user_id: UUID, update: ProfileUpdate) -> User:
        user = await self.get_user(user_id)
        updated = user.model_copy(update={**update.model_dump(exclude_none=True), "updated_at": now()})
        self.users[user_id] = updated
        return updated

    async def set_billing_customer_id(self, user_id: UUID, customer_id: str) -> User:
        user = await self.get_user(user_id)
        updated = user.model_copy(update={"billing_customer_id": customer_id})
        self.users[user_id] = updated
        return updated

    async def delete_user(self, user_id: UUID) -> None:
        if self.users.pop(user_id, None) is None:
            raise NotFoundError("User not found")


@pytest.fixture
def config(tmp_path):
    """Configuration isolated from the environment and any .env file."""
    return Config(
        _env_file=None,
        database_url="mongodb://localhost:27017/saaskit_test",
        google_client_id="test-client-id",
        google_client_secret="test-client-secret",
        storage_path=str(tmp_path / "storage"),
    )


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def session_service(store):
    return SessionService(store)


@pytest.fixture
def users():
    return InMemoryUserService()


@pytest.fixture
def identity():
    return IdentitySnapshot(user_id=uuid4(), user_email="ada@example.com", user_name="Ada")


@pytest.fixture
def app_instance(config, store, users):
    """App with the user directory and session store replaced by in-memory fakes."""
    app = App(config)
    services = app._core.services
    services.user = users
    services.session = SessionService(store)
    services.set_core(app._core)
    return app


@pytest.fixture
def client(app_instance, config):
    """Test client without lifespan, so no database connection is made."""
    return TestClient(create_fastapi_app(app_instance, config), follow_redirects=False)


@pytest.fixture
def signed_in(store, users):
    """A stored user with a live session. Returns (user, session)."""
    user = users.add()
    session = Session.start(IdentitySnapshot(user_id=user.id, user_email=user.email, user_name=user.name))
    store.records[session.id] = session
    return user, session
