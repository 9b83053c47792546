from fastapi import APIRouter, Depends
from pydantic import AnyHttpUrl, BaseModel, Field

from saaskit.web.deps import AppDep, SessionDep, require_same_origin
from saaskit.web.openapi import ErrorResponse

router = APIRouter(prefix="/api/subscription", tags=["subscription"], dependencies=[Depends(require_same_origin)])


class SubscriptionStatusResponse(BaseModel):
    """Subscription state of the current user."""

    is_pro: bool = Field(..., description="Whether the user has an active subscription")
    status: str | None = Field(None, description="Stripe status, 'not_configured' or 'unknown'")
    subscription_id: str | None = Field(None, description="Active subscription ID")


class CreateCheckoutRequest(BaseModel):
    """Request to start a subscription checkout."""

    success_url: AnyHttpUrl | None = Field(None, description="Redirect after successful payment")
    cancel_url: AnyHttpUrl | None = Field(None, description="Redirect after cancelled payment")


class CreatePortalRequest(BaseModel):
    """Request to open the billing portal."""

    return_url: AnyHttpUrl | None = Field(None, description="Redirect when leaving the portal")


class RedirectUrlResponse(BaseModel):
    """URL the client should navigate to."""

    url: str = Field(..., description="Stripe-hosted page URL")


@router.get(
    "/status",
    summary="Get subscription status",
    description="Report whether the current user has an active subscription.",
    operation_id="getSubscriptionStatus",
    responses={
        200: {"description": "Subscription status"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_status(app: AppDep, session: SessionDep) -> SubscriptionStatusResponse:
    status = await app.get_subscription_status(session)
    return SubscriptionStatusResponse(is_pro=status.is_active, status=status.status, subscription_id=status.subscription_id)


@router.post(
    "/checkout",
    summary="Create checkout session",
    description="Start a Stripe Checkout for the configured subscription price.",
    operation_id="createCheckoutSession",
    responses={
        200: {"description": "Checkout URL"},
        400: {"model": ErrorResponse, "description": "Stripe not configured"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def create_checkout(request: CreateCheckoutRequest, app: AppDep, session: SessionDep) -> RedirectUrlResponse:
    url = await app.create_checkout(
        session,
        success_url=str(request.success_url) if request.success_url else None,
        cancel_url=str(request.cancel_url) if request.cancel_url else None,
    )
    return RedirectUrlResponse(url=url)


@router.post(
    "/portal",
    summary="Create billing portal session",
    description="Open the Stripe customer portal for managing the subscription.",
    operation_id="createPortalSession",
    responses={
        200: {"description": "Portal URL"},
        400: {"model": ErrorResponse, "description": "Stripe not configured"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "No subscription found"},
    },
)
async def create_portal(request: CreatePortalRequest, app: AppDep, session: SessionDep) -> RedirectUrlResponse:
    url = await app.create_portal(session, return_url=str(request.return_url) if request.return_url else None)
    return RedirectUrlResponse(url=url)
