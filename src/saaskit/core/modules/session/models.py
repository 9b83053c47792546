"""Session management models."""

import math
import secrets
import time
from datetime import datetime, timedelta
from typing import Any, NewType
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from saaskit.utils import now

SessionId = NewType("SessionId", str)

SESSION_DURATION = timedelta(hours=24)


def new_session_id() -> SessionId:
    """Generate an unguessable session id that sorts by creation time.

    12 hex digits of millisecond timestamp followed by 128 random bits.
    """
    return SessionId(f"{time.time_ns() // 1_000_000:012x}{secrets.token_hex(16)}")


class IdentitySnapshot(BaseModel):
    """User identity copied onto a session so requests can skip a directory lookup."""

    user_id: UUID
    user_email: str
    user_name: str
    billing_customer_id: str | None = None


class SessionUpdate(BaseModel):
    """Identity fields that may be replaced on refresh. Unset fields are kept."""

    user_email: str | None = None
    user_name: str | None = None
    billing_customer_id: str | None = None


class Session(BaseModel):
    """Server-side session record.

    Stored in the `sessions` collection keyed by session id. Indexed on
    user_id and expires_at (TTL, expireAfterSeconds=0).
    """

    id: SessionId = Field(alias="_id", serialization_alias="id")
    user_id: UUID
    user_email: str
    user_name: str
    billing_customer_id: str | None = None
    created_at: datetime
    expires_at: datetime
    last_activity_at: datetime

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def start(cls, identity: IdentitySnapshot) -> "Session":
        """Build a fresh session for the given identity."""
        started_at = now()
        return cls(
            id=new_session_id(),
            **identity.model_dump(),
            created_at=started_at,
            expires_at=started_at + SESSION_DURATION,
            last_activity_at=started_at,
        )

    def is_expired(self, at: datetime | None = None) -> bool:
        return (at or now()) > self.expires_at

    def remaining_seconds(self, at: datetime | None = None) -> int:
        return max(0, math.ceil((self.expires_at - (at or now())).total_seconds()))

    def to_mongo(self) -> dict[str, Any]:
        data = self.model_dump()
        data["_id"] = data.pop("id")
        return data
