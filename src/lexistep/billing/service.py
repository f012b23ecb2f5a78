"""Billing operations initiated by the user: checkout, status and resubscribe."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.billing.provider import BaseBillingProvider, BillingProviderError
from lexistep.config import get_settings
from lexistep.db.models import Subscription, User

logger = structlog.get_logger()


class SubscriptionNotFoundError(LookupError):
    """Raised when the user has no subscription to act on."""


@dataclass(frozen=True)
class SubscriptionStatus:
    is_pro: bool
    is_canceled: bool
    is_expired: bool
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None
    stripe_current_period_end: datetime | None = None


@dataclass(frozen=True)
class ResubscribeResult:
    """Either a checkout URL to follow, or confirmation of in-place reactivation."""

    url: str | None = None
    reactivated: bool = False


def _absolute_url(path: str) -> str:
    return f"{get_settings().public_base_url.rstrip('/')}{path}"


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


async def get_subscription(db: AsyncSession, user_id: int) -> Subscription | None:
    result = await db.execute(select(Subscription).where(Subscription.user_id == user_id))
    return result.scalar_one_or_none()


def is_expired(subscription: Subscription | None, now: datetime | None = None) -> bool:
    """True when a subscription reference exists and its period has ended."""
    if subscription is None or not subscription.stripe_subscription_id:
        return False
    if subscription.stripe_current_period_end is None:
        return True
    return _as_utc(subscription.stripe_current_period_end) < (now or datetime.now(timezone.utc))


async def get_subscription_status(
    db: AsyncSession,
    user: User,
    now: datetime | None = None,
) -> SubscriptionStatus:
    subscription = await get_subscription(db, user.id)
    if subscription is None:
        return SubscriptionStatus(is_pro=user.is_pro, is_canceled=False, is_expired=False)
    return SubscriptionStatus(
        is_pro=user.is_pro,
        is_canceled=subscription.is_canceled,
        is_expired=is_expired(subscription, now),
        stripe_customer_id=subscription.stripe_customer_id,
        stripe_subscription_id=subscription.stripe_subscription_id,
        stripe_current_period_end=subscription.stripe_current_period_end,
    )


async def create_checkout(db: AsyncSession, user: User, provider: BaseBillingProvider) -> str:
    """
    Start a Pro checkout, or open the billing portal for existing subscribers.

    Returns:
        The hosted page URL.

    Raises:
        BillingProviderError: If the provider call fails.
    """
    subscription = await get_subscription(db, user.id)
    if user.is_pro and subscription is not None and subscription.stripe_customer_id:
        url = await provider.create_portal_session(
            customer_id=subscription.stripe_customer_id,
            return_url=_absolute_url("/account"),
        )
        logger.info("billing_portal_opened", user_id=user.id)
        return url

    price_id = get_settings().stripe_pro_price_id
    if not price_id:
        msg = "Pro price is not configured"
        raise BillingProviderError(msg)
    url = await provider.create_checkout_session(
        price_id=price_id,
        success_url=_absolute_url("/settings?success=true"),
        cancel_url=_absolute_url("/settings?canceled=true"),
        customer_email=user.email,
        user_id=user.id,
    )
    logger.info("checkout_started", user_id=user.id)
    return url


async def resubscribe(db: AsyncSession, user: User, provider: BaseBillingProvider) -> ResubscribeResult:
    """
    Restart a canceled subscription.

    An expired subscription gets a new checkout for the same customer; one
    still inside its period is reactivated in place.

    Raises:
        SubscriptionNotFoundError: If the user has no subscription references.
        BillingProviderError: If the provider call fails.
    """
    subscription = await get_subscription(db, user.id)
    if subscription is None or not subscription.stripe_customer_id or not subscription.stripe_subscription_id:
        msg = "No subscription found"
        raise SubscriptionNotFoundError(msg)

    if is_expired(subscription):
        url = await provider.create_checkout_session(
            price_id=get_settings().stripe_pro_price_id,
            success_url=_absolute_url("/settings?checkout_success=true"),
            cancel_url=_absolute_url("/settings?checkout_canceled=true"),
            customer_id=subscription.stripe_customer_id,
            user_id=user.id,
        )
        logger.info("resubscribe_checkout_started", user_id=user.id)
        return ResubscribeResult(url=url)

    await provider.reactivate_subscription(subscription.stripe_subscription_id)
    await db.execute(
        update(Subscription)
        .where(Subscription.id == subscription.id)
        .values(is_canceled=False, updated_at=datetime.now(timezone.utc))
    )
    await db.commit()
    logger.info("subscription_reactivated", user_id=user.id)
    return ResubscribeResult(reactivated=True)
