from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

import httpx
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from saaskit.config import Config

if TYPE_CHECKING:
    from saaskit.core.modules.account.service import AccountService
    from saaskit.core.modules.billing.service import BillingService
    from saaskit.core.modules.oauth.service import OAuthService
    from saaskit.core.modules.session.service import SessionService
    from saaskit.core.modules.storage.service import StorageService
    from saaskit.core.modules.user.service import UserService


class Service:
    """Base class for services. Collaborators are reached through the core."""

    def __init__(self) -> None:
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry. Services are started in declaration order and stopped in reverse."""

    user: UserService
    session: SessionService
    oauth: OAuthService
    billing: BillingService
    storage: StorageService
    account: AccountService

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        from saaskit.core.modules.account.service import AccountService  # noqa: PLC0415
        from saaskit.core.modules.billing.service import BillingService  # noqa: PLC0415
        from saaskit.core.modules.oauth.service import OAuthService  # noqa: PLC0415
        from saaskit.core.modules.session.service import SessionService  # noqa: PLC0415
        from saaskit.core.modules.session.store import MongoSessionStore  # noqa: PLC0415
        from saaskit.core.modules.storage.service import StorageService  # noqa: PLC0415
        from saaskit.core.modules.user.service import UserService  # noqa: PLC0415

        self.user = UserService(database)
        self.session = SessionService(MongoSessionStore(database.get_collection("sessions")))
        self.oauth = OAuthService()
        self.billing = BillingService()
        self.storage = StorageService()
        self.account = AccountService()

    def all(self) -> list[Service]:
        # Resolved on each call so tests can swap in fakes before startup
        return [self.user, self.session, self.oauth, self.billing, self.storage, self.account]

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self.all():
            service.set_core(core)

    async def start_all(self) -> None:
        for service in self.all():
            await service.on_start()

    async def stop_all(self) -> None:
        for service in reversed(self.all()):
            await service.on_stop()


class Core:
    """Container providing config, database, HTTP client, and all service instances."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]]
    database: AsyncDatabase[dict[str, Any]]
    http_client: httpx.AsyncClient
    services: Services

    def __init__(self, config: Config) -> None:
        """Initialize core with config, MongoDB, an outbound HTTP client, and services."""
        self.config = config
        self.mongo_client = AsyncMongoClient(config.database_url, uuidRepresentation="standard", tz_aware=True)
        self.database = self.mongo_client.get_database(urlparse(config.database_url).path[1:])
        self.http_client = httpx.AsyncClient(timeout=15.0)
        self.services = Services(self.database)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services, then close the HTTP client and MongoDB connection."""
        await self.services.stop_all()
        await self.http_client.aclose()
        await self.mongo_client.aclose()
