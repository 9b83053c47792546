from typing import Any

import httpx
import structlog

from saaskit.core.core import Service
from saaskit.core.modules.billing.models import SubscriptionStatus
from saaskit.core.modules.user.models import User
from saaskit.errors import BillingNotConfiguredError, ExternalServiceError

logger = structlog.get_logger(__name__)

STRIPE_API_URL = "https://api.stripe.com/v1"


class BillingService(Service):
    """Stripe subscriptions over the REST API.

    All operations require `stripe_api_key`; checkout additionally requires `stripe_price_id`.
    """

    @property
    def enabled(self) -> bool:
        return self.core.config.billing_enabled

    async def create_checkout_session(self, user: User, success_url: str, cancel_url: str) -> str:
        """Create a subscription checkout and return its URL.

        Creates the Stripe customer on first use and stores its id on the user.
        """
        if not self.enabled or not self.core.config.stripe_price_id:
            raise BillingNotConfiguredError

        customer_id = user.billing_customer_id
        if not customer_id:
            customer = await self._request(
                "POST",
                "/customers",
                data={"email": user.email, "metadata[user_id]": str(user.id)},
            )
            customer_id = str(customer["id"])
            await self.core.services.user.set_billing_customer_id(user.id, customer_id)
            logger.info("billing_customer_created", user_id=user.id, customer_id=customer_id)

        session = await self._request(
            "POST",
            "/checkout/sessions",
            data={
                "customer": customer_id,
                "mode": "subscription",
                "payment_method_types[0]": "card",
                "line_items[0][price]": self.core.config.stripe_price_id,
                "line_items[0][quantity]": "1",
                "success_url": success_url,
                "cancel_url": cancel_url,
                "metadata[user_id]": str(user.id),
            },
        )
        return str(session["url"])

    async def create_portal_session(self, customer_id: str, return_url: str) -> str:
        if not self.enabled:
            raise BillingNotConfiguredError
        session = await self._request(
            "POST",
            "/billing_portal/sessions",
            data={"customer": customer_id, "return_url": return_url},
        )
        return str(session["url"])

    async def get_subscription_status(self, user: User) -> SubscriptionStatus:
        """Current subscription state. Provider errors degrade to status 'unknown'."""
        if not self.enabled or not user.billing_customer_id:
            return SubscriptionStatus.inactive()

        try:
            result = await self._request(
                "GET",
                "/subscriptions",
                params={"customer": user.billing_customer_id, "status": "all"},
            )
        except ExternalServiceError:
            logger.exception("subscription_status_failed", user_id=user.id)
            return SubscriptionStatus.inactive("unknown")

        return SubscriptionStatus.from_subscriptions(result.get("data", []))

    async def cancel_customer(self, customer_id: str) -> None:
        """Cancel all active subscriptions of the customer, then delete the customer."""
        if not self.enabled:
            raise BillingNotConfiguredError

        result = await self._request("GET", "/subscriptions", params={"customer": customer_id, "status": "active"})
        for subscription in result.get("data", []):
            await self._request("DELETE", f"/subscriptions/{subscription['id']}")
            logger.info("subscription_cancelled", customer_id=customer_id, subscription_id=subscription["id"])

        await self._request("DELETE", f"/customers/{customer_id}")
        logger.info("billing_customer_deleted", customer_id=customer_id)

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {self.core.config.stripe_api_key}"}
        try:
            resp = await self.core.http_client.request(method, f"{STRIPE_API_URL}{path}", headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Stripe request failed: {e}") from e

        if resp.is_error:
            try:
                message = resp.json()["error"]["message"]
            except (ValueError, KeyError, TypeError):
                message = resp.text
            logger.warning("stripe_request_rejected", path=path, status_code=resp.status_code, error=message)
            raise ExternalServiceError(f"Stripe request failed: {resp.status_code} {message}")
        result: dict[str, Any] = resp.json()
        return result
