"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from lexistep.billing.provider import BaseBillingProvider


def get_billing_provider(request: Request) -> BaseBillingProvider:
    """Return the billing provider installed on the running application."""
    provider: BaseBillingProvider | None = getattr(request.app.state, "billing_provider", None)
    if provider is None:
        msg = "Billing provider not initialized."
        raise RuntimeError(msg)
    return provider
