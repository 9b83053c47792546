from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from pydantic import BaseModel, Field
from pymongo.errors import PyMongoError

from saaskit.config import Config
from saaskit.core.core import Core
from saaskit.core.modules.billing.models import SubscriptionStatus
from saaskit.core.modules.session.models import IdentitySnapshot, Session, SessionId, SessionUpdate
from saaskit.core.modules.user.models import ProfileUpdate, User, UserView
from saaskit.errors import BillingNotConfiguredError, NotFoundError, StorageError

logger = structlog.get_logger(__name__)


class DashboardView(BaseModel):
    """Data shown on the signed-in landing page."""

    user: UserView = Field(..., description="Current user")
    is_pro: bool = Field(..., description="Whether the user has an active subscription")


class App:
    """Facade for all application operations. Route handlers talk only to this class."""

    def __init__(self, config: Config) -> None:
        self._core = Core(config)

    @property
    def config(self) -> Config:
        return self._core.config

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Sessions ===
    async def validate_session(self, session_id: str | None) -> Session | None:
        return await self._core.services.session.validate_session(session_id)

    async def get_session_user(self, session_id: str | None) -> User | None:
        """User behind a session cookie, or None when the session or the user is gone.

        A failed directory lookup is treated as no user.
        """
        session = await self.validate_session(session_id)
        if session is None:
            return None
        try:
            return await self._core.services.user.find_by_id(session.user_id)
        except PyMongoError:
            logger.exception("session_user_lookup_failed", user_id=session.user_id)
            return None

    async def refresh_session(self, session: Session) -> tuple[Session, UserView]:
        """Extend the session and resync its identity snapshot from the user record."""
        user = await self._resolve_user(session)
        refreshed = await self._core.services.session.refresh_session(
            session.id,
            SessionUpdate(user_email=user.email, user_name=user.name, billing_customer_id=user.billing_customer_id),
        )
        if refreshed is None:
            raise StorageError("Failed to refresh session")
        return refreshed, UserView.from_domain(user)

    async def logout(self, session: Session) -> None:
        await self._core.services.session.destroy_session(session.id)

    # === Google sign-in ===
    def get_authorization_url(self, state: str) -> str:
        return self._core.services.oauth.build_authorization_url(state)

    async def login_with_google(self, code: str) -> SessionId:
        """Exchange the authorization code, find or create the user and start a session.

        Raises StorageError if the session cannot be written.
        """
        services = self._core.services
        token = await services.oauth.exchange_code(code)
        profile = await services.oauth.fetch_profile(token.access_token)

        user = await services.user.find_by_email(profile.email)
        if user is None:
            user = await services.user.create_user(
                email=profile.email,
                google_id=profile.google_id,
                name=profile.name,
                given_name=profile.given_name,
                family_name=profile.family_name,
                profile_picture=profile.picture,
            )

        session_id = await services.session.create_session(
            IdentitySnapshot(
                user_id=user.id,
                user_email=user.email,
                user_name=user.name,
                billing_customer_id=user.billing_customer_id,
            )
        )
        logger.info("user_signed_in", user_id=user.id)
        return session_id

    # === Profile ===
    async def get_profile(self, session: Session) -> UserView:
        return UserView.from_domain(await self._resolve_user(session))

    async def update_profile(self, session: Session, update: ProfileUpdate) -> UserView:
        user = await self._core.services.user.update_profile(session.user_id, update)
        return UserView.from_domain(user)

    async def get_dashboard(self, session: Session) -> DashboardView | None:
        """Dashboard data, or None when the session's user no longer exists."""
        user = await self._core.services.user.find_by_id(session.user_id)
        if user is None:
            return None
        status = await self._core.services.billing.get_subscription_status(user)
        return DashboardView(user=UserView.from_domain(user), is_pro=status.is_active)

    # === Subscription ===
    async def get_subscription_status(self, session: Session) -> SubscriptionStatus:
        if not self._core.services.billing.enabled:
            return SubscriptionStatus.inactive("not_configured")
        user = await self._resolve_user(session)
        return await self._core.services.billing.get_subscription_status(user)

    async def create_checkout(self, session: Session, success_url: str | None, cancel_url: str | None) -> str:
        if not self._core.services.billing.enabled:
            raise BillingNotConfiguredError
        user = await self._resolve_user(session)
        base_url = self.config.app_url.rstrip("/")
        return await self._core.services.billing.create_checkout_session(
            user,
            success_url=success_url or f"{base_url}/dashboard?subscription=success",
            cancel_url=cancel_url or f"{base_url}/dashboard?subscription=cancelled",
        )

    async def create_portal(self, session: Session, return_url: str | None) -> str:
        if not self._core.services.billing.enabled:
            raise BillingNotConfiguredError
        user = await self._resolve_user(session)
        if not user.billing_customer_id:
            raise NotFoundError("No active subscription found")
        return await self._core.services.billing.create_portal_session(
            user.billing_customer_id,
            return_url or f"{self.config.app_url.rstrip('/')}/dashboard",
        )

    # === Account ===
    async def delete_account(self, session: Session) -> None:
        """Delete the account behind the session, then the session itself."""
        await self._core.services.account.delete_account(session.user_id)
        await self._core.services.session.destroy_session(session.id)

    # === Private resolver methods ===
    async def _resolve_user(self, session: Session) -> User:
        """Resolve the session's user. Raises NotFoundError if the user was deleted."""
        return await self._core.services.user.get_user(session.user_id)

