"""
Subscription reconciler: applies verified billing events to local state.

Every handler assigns absolute values taken from the event, so replaying an
event converges to the same Subscription and User state. Events are applied
in arrival order; a stale event delivered after a newer one overwrites it.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lexistep.config import get_settings
from lexistep.db.models import Subscription, User
from lexistep.db.upsert import insert_for

logger = structlog.get_logger()

CHECKOUT_COMPLETED = "checkout.session.completed"
SUBSCRIPTION_UPDATED = "customer.subscription.updated"
SUBSCRIPTION_DELETED = "customer.subscription.deleted"


class ReconcileOutcome(str, enum.Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    IGNORED = "ignored"


def _from_timestamp(value: Any) -> datetime | None:  # noqa: ANN401
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _first_item(obj: dict[str, Any]) -> dict[str, Any]:
    for key in ("items", "line_items"):
        data = (obj.get(key) or {}).get("data") or []
        if data:
            return data[0]
    return {}


def _price_id(obj: dict[str, Any]) -> str | None:
    return (_first_item(obj).get("price") or {}).get("id")


def _current_period_end(subscription: dict[str, Any]) -> datetime | None:
    # Newer API versions report the period on the subscription item.
    value = subscription.get("current_period_end") or _first_item(subscription).get("current_period_end")
    return _from_timestamp(value)


async def _resolve_checkout_user(db: AsyncSession, session: dict[str, Any]) -> User | None:
    metadata = session.get("metadata") or {}
    raw_id = metadata.get("user_id") or metadata.get("userId")
    if raw_id is not None:
        try:
            user = await db.get(User, int(raw_id))
        except (TypeError, ValueError):
            user = None
        if user is not None:
            return user

    email = session.get("customer_email") or (session.get("customer_details") or {}).get("email")
    if not email:
        return None
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def handle_checkout_completed(db: AsyncSession, session: dict[str, Any]) -> ReconcileOutcome:
    """Record the new subscription and grant Pro."""
    subscription_id = session.get("subscription")
    if not subscription_id:
        logger.warning("checkout_missing_subscription", session_id=session.get("id"))
        return ReconcileOutcome.SKIPPED

    user = await _resolve_checkout_user(db, session)
    if user is None:
        logger.warning(
            "checkout_user_not_found",
            session_id=session.get("id"),
            customer_email=session.get("customer_email"),
        )
        return ReconcileOutcome.SKIPPED

    now = datetime.now(timezone.utc)
    values = {
        "stripe_customer_id": session.get("customer"),
        "stripe_subscription_id": subscription_id,
        "stripe_price_id": _price_id(session) or get_settings().stripe_pro_price_id or None,
        "stripe_current_period_end": _from_timestamp(session.get("expires_at")),
        "is_canceled": False,
        "updated_at": now,
    }
    stmt = insert_for(db, Subscription).values(user_id=user.id, **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id"],
        set_={key: getattr(stmt.excluded, key) for key in values},
    )
    await db.execute(stmt)
    await db.execute(update(User).where(User.id == user.id).values(is_pro=True))

    logger.info("subscription_activated", user_id=user.id, subscription=subscription_id)
    return ReconcileOutcome.APPLIED


async def handle_subscription_changed(db: AsyncSession, subscription: dict[str, Any]) -> ReconcileOutcome:
    """Mirror the provider's subscription status onto the owning user."""
    customer_id = subscription.get("customer")
    if not customer_id:
        logger.warning("subscription_event_missing_customer", subscription=subscription.get("id"))
        return ReconcileOutcome.SKIPPED

    result = await db.execute(select(Subscription).where(Subscription.stripe_customer_id == customer_id))
    local = result.scalar_one_or_none()
    if local is None:
        logger.warning("subscription_user_not_found", customer=customer_id)
        return ReconcileOutcome.SKIPPED

    status = subscription.get("status")
    is_canceled = subscription.get("cancel_at_period_end") is True or status == "canceled"
    is_pro = status == "active"

    await db.execute(
        update(Subscription)
        .where(Subscription.id == local.id)
        .values(
            stripe_subscription_id=subscription.get("id") or local.stripe_subscription_id,
            stripe_current_period_end=_current_period_end(subscription),
            is_canceled=is_canceled,
            updated_at=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )
    await db.execute(
        update(User)
        .where(User.id == local.user_id)
        .values(is_pro=is_pro)
        .execution_options(synchronize_session=False)
    )

    logger.info(
        "subscription_updated",
        user_id=local.user_id,
        status=status,
        is_pro=is_pro,
        is_canceled=is_canceled,
    )
    return ReconcileOutcome.APPLIED


async def reconcile_event(db: AsyncSession, event: dict[str, Any]) -> ReconcileOutcome:
    """Apply one verified event and commit. Unhandled types are ignored."""
    event_type = event.get("type")
    obj = (event.get("data") or {}).get("object") or {}

    try:
        if event_type == CHECKOUT_COMPLETED:
            outcome = await handle_checkout_completed(db, obj)
        elif event_type in (SUBSCRIPTION_UPDATED, SUBSCRIPTION_DELETED):
            outcome = await handle_subscription_changed(db, obj)
        else:
            logger.info("webhook_event_ignored", event_type=event_type, event_id=event.get("id"))
            return ReconcileOutcome.IGNORED
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return outcome
