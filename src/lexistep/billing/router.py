"""Billing API endpoints: checkout, subscription status, resubscribe and webhook."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.auth.dependencies import get_current_user
from lexistep.billing.provider import BaseBillingProvider, BillingProviderError
from lexistep.billing.reconciler import reconcile_event
from lexistep.billing.schemas import (
    CheckoutResponse,
    ResubscribeResponse,
    SubscriptionStatusResponse,
    WebhookResponse,
)
from lexistep.billing.service import (
    SubscriptionNotFoundError,
    create_checkout,
    get_subscription_status,
    resubscribe,
)
from lexistep.billing.webhooks import WebhookVerificationError, construct_event
from lexistep.config import get_settings
from lexistep.database import get_session
from lexistep.db.models import User
from lexistep.dependencies import get_billing_provider

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/billing", tags=["Billing"])


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    provider: BaseBillingProvider = Depends(get_billing_provider),
) -> CheckoutResponse:
    """Hosted checkout for new subscribers, billing portal for existing ones."""
    try:
        url = await create_checkout(db, user, provider)
    except BillingProviderError as e:
        logger.error("checkout_failed", user_id=user.id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error") from e
    return CheckoutResponse(url=url)


@router.get("/subscription", response_model=SubscriptionStatusResponse)
async def subscription_status(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SubscriptionStatusResponse:
    """Current subscription state."""
    status = await get_subscription_status(db, user)
    return SubscriptionStatusResponse(
        is_pro=status.is_pro,
        is_canceled=status.is_canceled,
        is_expired=status.is_expired,
        stripe_customer_id=status.stripe_customer_id,
        stripe_subscription_id=status.stripe_subscription_id,
        stripe_current_period_end=status.stripe_current_period_end,
    )


@router.post("/resubscribe", response_model=ResubscribeResponse)
async def resubscribe_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    provider: BaseBillingProvider = Depends(get_billing_provider),
) -> ResubscribeResponse:
    """Reactivate a canceled subscription, or restart an expired one via checkout."""
    try:
        result = await resubscribe(db, user, provider)
    except SubscriptionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except BillingProviderError as e:
        logger.error("resubscribe_failed", user_id=user.id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error") from e
    return ResubscribeResponse(url=result.url, success=True)


@router.post("/webhook", response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None, alias="Stripe-Signature"),
    db: AsyncSession = Depends(get_session),
) -> WebhookResponse:
    """Verify and apply a billing-provider event."""
    settings = get_settings()
    if not stripe_signature or not settings.stripe_webhook_secret:
        raise HTTPException(status_code=400, detail="Webhook signature missing")

    payload = await request.body()
    try:
        event = construct_event(
            payload,
            stripe_signature,
            settings.stripe_webhook_secret,
            tolerance=settings.stripe_webhook_tolerance_seconds,
        )
    except WebhookVerificationError as e:
        logger.warning("webhook_rejected", error=str(e))
        raise HTTPException(status_code=400, detail="Webhook signature verification failed") from e

    outcome = await reconcile_event(db, event)
    logger.info("webhook_processed", event_type=event.get("type"), outcome=outcome.value)
    return WebhookResponse(outcome=outcome.value)
