"""Tests for gateway adapters and the gateway factory."""

import hashlib
import hmac
import json
import time

import pytest
import stripe
from payments.gateway import get_gateway, reset_gateway, set_gateway
from payments.gateway.fake_adapter import TEST_SIGNATURE, FakeGateway
from payments.gateway.port import GatewayError, WebhookSignatureError, parse_event
from payments.gateway.stripe_adapter import StripeGateway


def _stripe_signature(payload: bytes, secret: str) -> str:
    timestamp = int(time.time())
    signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


class TestFakeGateway:
    def test_checkout_session(self):
        gateway = FakeGateway()
        session = gateway.create_checkout_session(
            customer_id="cus_1",
            amount_cents=100,
            currency="eur",
            product_name="Artwork Listing Fee",
            description="List it",
            metadata={"transaction_id": "txn-1"},
            success_url="http://localhost:3000/ok",
            cancel_url="http://localhost:3000/cancel",
        )
        assert session.session_id.startswith("cs_fake_")
        assert session.session_id in session.url

    def test_configured_failure(self):
        gateway = FakeGateway()
        gateway.configure(should_succeed=False, failure_reason="Card declined")
        with pytest.raises(GatewayError, match="Card declined"):
            gateway.ensure_customer("user-1", "user@example.com")

    def test_refund_recorded(self):
        gateway = FakeGateway()
        result = gateway.refund_payment("pi_1", 45000, "txn-1")
        assert result.refund_id == "re_fake_txn-1"
        assert gateway.calls[-1] == {
            "method": "refund_payment",
            "payment_reference": "pi_1",
            "amount_cents": 45000,
            "transaction_id": "txn-1",
        }

    def test_webhook_requires_test_signature(self):
        payload = FakeGateway.webhook_payload("checkout.session.completed", session_id="cs_1")
        with pytest.raises(WebhookSignatureError):
            FakeGateway().construct_webhook_event(payload, "bad-signature")

    def test_webhook_rejects_malformed_payload(self):
        with pytest.raises(WebhookSignatureError):
            FakeGateway().construct_webhook_event(b"not json", TEST_SIGNATURE)

    def test_checkout_session_payload(self):
        payload = FakeGateway.webhook_payload(
            "checkout.session.completed",
            session_id="cs_1",
            metadata={"transaction_id": "txn-1"},
            payment_reference="pi_1",
            event_id="evt_1",
        )
        event = FakeGateway().construct_webhook_event(payload, TEST_SIGNATURE)
        assert event.event_id == "evt_1"
        assert event.session_id == "cs_1"
        assert event.payment_reference == "pi_1"
        assert event.metadata == {"transaction_id": "txn-1"}

    def test_payment_intent_failure_payload(self):
        payload = FakeGateway.webhook_payload(
            "payment_intent.payment_failed",
            payment_reference="pi_2",
            failure_reason="Insufficient funds",
        )
        event = FakeGateway().construct_webhook_event(payload, TEST_SIGNATURE)
        assert event.session_id is None
        assert event.payment_reference == "pi_2"
        assert event.failure_reason == "Insufficient funds"


class TestParseEvent:
    def test_charge_event_uses_payment_intent(self):
        event = parse_event(
            {
                "id": "evt_9",
                "type": "charge.refunded",
                "data": {"object": {"id": "ch_1", "payment_intent": "pi_9", "metadata": {"transaction_id": "t"}}},
            }
        )
        assert event.payment_reference == "pi_9"
        assert event.metadata["transaction_id"] == "t"

    def test_missing_data(self):
        event = parse_event({"id": "evt_0", "type": "ping"})
        assert event.metadata == {}
        assert event.session_id is None


class TestStripeGateway:
    def test_valid_signature(self):
        gateway = StripeGateway(api_key="sk_test_123", webhook_secret="whsec_test")
        payload = json.dumps(
            {
                "id": "evt_live_1",
                "object": "event",
                "type": "checkout.session.completed",
                "data": {"object": {"id": "cs_live_1", "payment_intent": "pi_live_1", "metadata": {}}},
            }
        ).encode("utf-8")

        event = gateway.construct_webhook_event(payload, _stripe_signature(payload, "whsec_test"))
        assert event.event_id == "evt_live_1"
        assert event.session_id == "cs_live_1"

    def test_wrong_secret(self):
        gateway = StripeGateway(api_key="sk_test_123", webhook_secret="whsec_test")
        payload = json.dumps({"id": "evt_1", "object": "event", "type": "ping", "data": {"object": {}}}).encode("utf-8")
        with pytest.raises(WebhookSignatureError):
            gateway.construct_webhook_event(payload, _stripe_signature(payload, "whsec_other"))

    def test_missing_signature(self):
        gateway = StripeGateway(api_key="sk_test_123", webhook_secret="whsec_test")
        with pytest.raises(WebhookSignatureError):
            gateway.construct_webhook_event(b"{}", "")

    def test_refund_is_idempotent_per_transaction(self, monkeypatch):
        calls = []

        def fake_create(**params):
            calls.append(params)
            return stripe.Refund.construct_from({"id": "re_live_1"}, "sk_test_123")

        monkeypatch.setattr(stripe.Refund, "create", fake_create)
        gateway = StripeGateway(api_key="sk_test_123", webhook_secret="whsec_test")

        result = gateway.refund_payment("pi_live_1", 45000, "txn-1")

        assert result.refund_id == "re_live_1"
        assert calls[0]["payment_intent"] == "pi_live_1"
        assert calls[0]["amount"] == 45000
        assert calls[0]["idempotency_key"] == "refund_txn-1"

    def test_refund_error_becomes_gateway_error(self, monkeypatch):
        def fail(**params):
            raise stripe.InvalidRequestError("Charge already refunded", param="payment_intent")

        monkeypatch.setattr(stripe.Refund, "create", fail)
        gateway = StripeGateway(api_key="sk_test_123", webhook_secret="whsec_test")
        with pytest.raises(GatewayError):
            gateway.refund_payment("pi_live_1", 45000, "txn-1")


class TestGatewayFactory:
    def test_default_is_fake(self, monkeypatch):
        monkeypatch.delenv("PAYMENT_GATEWAY", raising=False)
        reset_gateway()
        assert isinstance(get_gateway(), FakeGateway)

    def test_stripe_from_environment(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_GATEWAY", "stripe")
        monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_123")
        monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", "whsec_test")
        reset_gateway()
        assert isinstance(get_gateway(), StripeGateway)

    def test_set_gateway(self):
        custom = FakeGateway()
        set_gateway(custom)
        assert get_gateway() is custom
