"""Request/response schemas for billing endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class CheckoutResponse(BaseModel):
    url: str


class SubscriptionStatusResponse(BaseModel):
    is_pro: bool
    is_canceled: bool
    is_expired: bool
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None
    stripe_current_period_end: datetime | None = None


class ResubscribeResponse(BaseModel):
    url: str | None = None
    success: bool = True


class WebhookResponse(BaseModel):
    received: bool = True
    outcome: str
