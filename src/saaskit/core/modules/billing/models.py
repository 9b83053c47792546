from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

ACTIVE_STATUSES = frozenset({"active", "trialing"})


class SubscriptionStatus(BaseModel):
    """Subscription state of a user as reported by Stripe."""

    is_active: bool = Field(..., description="Whether the user has an active or trialing subscription")
    subscription_id: str | None = Field(None, description="Active subscription ID")
    status: str | None = Field(None, description="Stripe subscription status")
    current_period_end: datetime | None = Field(None, description="End of the current billing period")

    @classmethod
    def inactive(cls, status: str | None = None) -> "SubscriptionStatus":
        return cls(is_active=False, status=status)

    @classmethod
    def from_subscriptions(cls, subscriptions: list[dict[str, Any]]) -> "SubscriptionStatus":
        """Pick the first active or trialing subscription from a Stripe list response."""
        active = next((sub for sub in subscriptions if sub.get("status") in ACTIVE_STATUSES), None)
        if active is None:
            return cls.inactive(subscriptions[0].get("status") if subscriptions else None)

        return cls(
            is_active=True,
            subscription_id=active["id"],
            status=active["status"],
            current_period_end=_period_end(active),
        )


def _period_end(subscription: dict[str, Any]) -> datetime | None:
    # Newer API versions moved the billing period onto subscription items
    period_end = subscription.get("current_period_end")
    if period_end is None:
        items = subscription.get("items", {}).get("data", [])
        if items:
            period_end = items[0].get("current_period_end")
    if period_end is None:
        return None
    return datetime.fromtimestamp(int(period_end), UTC)
