"""Webhook signature verification."""

from __future__ import annotations

import hashlib
import hmac
import json
import time

import pytest

from lexistep.billing.webhooks import WebhookVerificationError, construct_event

SECRET = "whsec_unit_secret"


def sign(payload: bytes, secret: str = SECRET, timestamp: int | None = None) -> str:
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.{payload.decode()}".encode()
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


PAYLOAD = json.dumps({"id": "evt_1", "type": "customer.subscription.updated", "data": {"object": {}}}).encode()


class TestConstructEvent:
    def test_valid_signature_returns_event(self):
        event = construct_event(PAYLOAD, sign(PAYLOAD), SECRET)
        assert event["id"] == "evt_1"
        assert event["type"] == "customer.subscription.updated"

    def test_wrong_secret_rejected(self):
        with pytest.raises(WebhookVerificationError):
            construct_event(PAYLOAD, sign(PAYLOAD, secret="whsec_other"), SECRET)

    def test_tampered_body_rejected(self):
        header = sign(PAYLOAD)
        tampered = PAYLOAD.replace(b"evt_1", b"evt_2")
        with pytest.raises(WebhookVerificationError):
            construct_event(tampered, header, SECRET)

    def test_stale_timestamp_rejected(self):
        header = sign(PAYLOAD, timestamp=int(time.time()) - 3600)
        with pytest.raises(WebhookVerificationError):
            construct_event(PAYLOAD, header, SECRET, tolerance=300)

    def test_garbage_header_rejected(self):
        with pytest.raises(WebhookVerificationError):
            construct_event(PAYLOAD, "not-a-signature", SECRET)
