from uuid import UUID

import structlog

from saaskit.core.core import Service

logger = structlog.get_logger(__name__)


class AccountService(Service):
    """Removes a user and everything attached to them across providers."""

    async def delete_account(self, user_id: UUID) -> None:
        """Delete the user's billing data, stored objects, user record and sessions.

        Billing and storage cleanup failures are logged and do not stop the deletion.
        Raises NotFoundError if the user does not exist.
        """
        services = self.core.services
        user = await services.user.get_user(user_id)
        logger.info("account_deletion_started", user_id=user_id)

        if services.billing.enabled and user.billing_customer_id:
            try:
                await services.billing.cancel_customer(user.billing_customer_id)
            except Exception:
                logger.exception("account_billing_cleanup_failed", user_id=user_id)

        try:
            await services.storage.delete_user_objects(user_id)
        except Exception:
            logger.exception("account_storage_cleanup_failed", user_id=user_id)

        await services.user.delete_user(user_id)
        await services.session.destroy_user_sessions(user_id)
        logger.info("account_deletion_completed", user_id=user_id)
