"""
Billing provider abstraction.

The application talks to Stripe through :class:`BaseBillingProvider` so the
hosted checkout and billing-portal calls can be swapped out in tests. The
provider instance lives on ``app.state`` and is built by the lifespan.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import stripe
import structlog

logger = structlog.get_logger()


class BillingProviderError(RuntimeError):
    """Raised when an outbound billing-provider call fails."""


class BaseBillingProvider(ABC):
    """Abstract base class for billing providers."""

    @abstractmethod
    async def create_checkout_session(
        self,
        *,
        price_id: str,
        success_url: str,
        cancel_url: str,
        customer_email: str | None = None,
        customer_id: str | None = None,
        user_id: int | None = None,
    ) -> str:
        """Create a hosted subscription checkout. Returns its URL."""
        ...

    @abstractmethod
    async def create_portal_session(self, *, customer_id: str, return_url: str) -> str:
        """Create a hosted billing-portal session. Returns its URL."""
        ...

    @abstractmethod
    async def reactivate_subscription(self, subscription_id: str) -> None:
        """Undo a pending cancellation (``cancel_at_period_end = false``)."""
        ...


class StripeBillingProvider(BaseBillingProvider):
    """Stripe implementation using the library's async request methods."""

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    async def create_checkout_session(
        self,
        *,
        price_id: str,
        success_url: str,
        cancel_url: str,
        customer_email: str | None = None,
        customer_id: str | None = None,
        user_id: int | None = None,
    ) -> str:
        params: dict = {
            "mode": "subscription",
            "success_url": success_url,
            "cancel_url": cancel_url,
            "billing_address_collection": "auto",
            "line_items": [{"price": price_id, "quantity": 1}],
        }
        if customer_id:
            params["customer"] = customer_id
        elif customer_email:
            params["customer_email"] = customer_email
        if user_id is not None:
            params["metadata"] = {"user_id": str(user_id)}

        try:
            session = await stripe.checkout.Session.create_async(api_key=self.api_key, **params)
        except stripe.StripeError as e:
            logger.error("stripe_checkout_failed", user_id=user_id, error=str(e))
            raise BillingProviderError(str(e)) from e
        return session.url

    async def create_portal_session(self, *, customer_id: str, return_url: str) -> str:
        try:
            session = await stripe.billing_portal.Session.create_async(
                api_key=self.api_key,
                customer=customer_id,
                return_url=return_url,
            )
        except stripe.StripeError as e:
            logger.error("stripe_portal_failed", customer=customer_id, error=str(e))
            raise BillingProviderError(str(e)) from e
        return session.url

    async def reactivate_subscription(self, subscription_id: str) -> None:
        try:
            await stripe.Subscription.modify_async(
                subscription_id,
                api_key=self.api_key,
                cancel_at_period_end=False,
            )
        except stripe.StripeError as e:
            logger.error("stripe_reactivate_failed", subscription=subscription_id, error=str(e))
            raise BillingProviderError(str(e)) from e
