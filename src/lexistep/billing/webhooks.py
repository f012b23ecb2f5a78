"""Inbound webhook authentication."""

from __future__ import annotations

import json
from typing import Any

import stripe


class WebhookVerificationError(ValueError):
    """Raised when a webhook payload cannot be authenticated or parsed."""


def construct_event(payload: bytes, sig_header: str, secret: str, tolerance: int = 300) -> dict[str, Any]:
    """
    Verify the ``Stripe-Signature`` header and decode the event.

    Raises:
        WebhookVerificationError: If the signature, timestamp or body is invalid.
    """
    try:
        body = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(body, sig_header, secret, tolerance)
        event = json.loads(body)
    except stripe.SignatureVerificationError as e:
        raise WebhookVerificationError(f"Signature verification failed: {e}") from e
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise WebhookVerificationError(f"Malformed payload: {e}") from e

    if not isinstance(event, dict) or "type" not in event:
        msg = "Malformed payload: missing event type"
        raise WebhookVerificationError(msg)
    return event
