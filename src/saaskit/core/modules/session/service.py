import asyncio
from collections.abc import Coroutine
from typing import Any
from uuid import UUID

import structlog

from saaskit.core.core import Service
from saaskit.core.modules.session.models import SESSION_DURATION, IdentitySnapshot, Session, SessionId, SessionUpdate
from saaskit.core.modules.session.store import SessionStore
from saaskit.errors import StorageError
from saaskit.utils import now

logger = structlog.get_logger(__name__)


class SessionService(Service):
    """Issues, validates, refreshes and revokes server-side sessions.

    Reads fail closed: any store error while validating is reported as "no session".
    Activity updates and deletion of expired records run as background tasks
    whose failures are only logged.
    """

    def __init__(self, store: SessionStore) -> None:
        super().__init__()
        self.store = store
        self._background_tasks: set[asyncio.Task[None]] = set()

    async def on_start(self) -> None:
        await self.store.ensure_indexes()
        logger.debug("session_service_started")

    async def on_stop(self) -> None:
        await self.flush_background_tasks()

    async def create_session(self, identity: IdentitySnapshot) -> SessionId:
        """Create and persist a new session. Raises StorageError if the write fails."""
        session = Session.start(identity)
        try:
            await self.store.put(session)
        except StorageError:
            logger.exception("session_create_failed", user_id=identity.user_id)
            raise
        logger.info("session_created", session_id=session.id, user_id=identity.user_id)
        return session.id

    async def validate_session(self, session_id: str | None) -> Session | None:
        """Return the live session for the id, or None if it is missing, expired or unreadable."""
        if not session_id:
            return None

        sid = SessionId(session_id)
        try:
            session = await self.store.get(sid)
        except StorageError:
            logger.exception("session_lookup_failed", session_id=sid)
            return None

        if session is None:
            return None

        if session.is_expired():
            logger.debug("session_expired", session_id=sid, expires_at=session.expires_at)
            self._spawn(self._delete_expired(sid))
            return None

        self._spawn(self._touch(sid))
        return session

    async def refresh_session(self, session_id: str | None, updates: SessionUpdate | None = None) -> Session | None:
        """Extend a live session by the full duration and optionally replace its identity snapshot.

        Read-modify-write without a version check: concurrent refreshes are last-write-wins.
        """
        session = await self.validate_session(session_id)
        if session is None:
            return None

        refreshed_at = now()
        changes: dict[str, Any] = updates.model_dump(exclude_none=True) if updates else {}
        refreshed = session.model_copy(
            update={
                **changes,
                "expires_at": refreshed_at + SESSION_DURATION,
                "last_activity_at": refreshed_at,
            }
        )

        try:
            await self.store.put(refreshed)
        except StorageError:
            logger.exception("session_refresh_failed", session_id=session.id)
            return None

        logger.debug("session_refreshed", session_id=session.id, expires_at=refreshed.expires_at)
        return refreshed

    async def destroy_session(self, session_id: str | None) -> None:
        """Delete the session. Never raises."""
        if not session_id:
            return
        try:
            await self.store.delete(SessionId(session_id))
        except StorageError:
            logger.exception("session_destroy_failed", session_id=session_id)
            return
        logger.info("session_destroyed", session_id=session_id)

    async def destroy_user_sessions(self, user_id: UUID) -> int:
        """Revoke every session that belongs to the user. Returns the number removed."""
        try:
            deleted = await self.store.delete_by_user(user_id)
        except StorageError:
            logger.exception("user_sessions_destroy_failed", user_id=user_id)
            return 0
        logger.info("user_sessions_destroyed", user_id=user_id, count=deleted)
        return deleted

    async def flush_background_tasks(self) -> None:
        """Wait for pending activity updates and expired-session deletions."""
        while self._background_tasks:
            await asyncio.gather(*self._background_tasks)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _touch(self, session_id: SessionId) -> None:
        try:
            await self.store.touch(session_id, now())
        except Exception:
            logger.exception("session_touch_failed", session_id=session_id)

    async def _delete_expired(self, session_id: SessionId) -> None:
        try:
            await self.store.delete(session_id)
        except Exception:
            logger.exception("expired_session_delete_failed", session_id=session_id)
