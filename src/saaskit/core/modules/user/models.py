from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from saaskit.core.db import MongoModel
from saaskit.utils import now


class User(MongoModel):
    """User account created on first Google sign-in."""

    email: str  # lower-cased, unique
    google_id: str
    name: str
    given_name: str | None = None
    family_name: str | None = None
    profile_picture: str | None = None
    billing_customer_id: str | None = None  # Stripe customer id
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)


class ProfileUpdate(BaseModel):
    """Profile fields a user may change themselves."""

    name: str | None = Field(None, min_length=1, description="Display name")
    given_name: str | None = Field(None, description="Given name")
    family_name: str | None = Field(None, description="Family name")


class UserView(BaseModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    name: str = Field(..., description="Display name")
    given_name: str | None = Field(None, description="Given name")
    family_name: str | None = Field(None, description="Family name")
    profile_picture: str | None = Field(None, description="Profile picture URL")
    created_at: datetime = Field(..., description="Account creation time")
    updated_at: datetime = Field(..., description="Last profile update time")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            given_name=user.given_name,
            family_name=user.family_name,
            profile_picture=user.profile_picture,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
