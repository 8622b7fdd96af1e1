"""Configurable fake payment gateway for development and testing.

This adapter simulates the hosted checkout flow without any external calls.
It can be configured at runtime to refuse checkouts, which is useful for:
- Manual API testing via /payments/gateway/configure
- Automated tests with predictable outcomes
- Development without real gateway credentials

Webhooks are accepted when signed with ``test-signature``. ``webhook_payload``
builds a Stripe-shaped event body to post to the webhook endpoint.
"""

import json
from uuid import uuid4

from payments.gateway.port import (
    CheckoutSession,
    CustomerResult,
    GatewayError,
    GatewayEvent,
    PaymentGateway,
    RefundResult,
    WebhookSignatureError,
    parse_event,
)

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def ensure_customer(self, user_id: str, email: str, username: str | None = None) -> CustomerResult:
        self.calls.append({"method": "ensure_customer", "user_id": user_id, "email": email})
        if not self.should_succeed:
            raise GatewayError(self.failure_reason)
        return CustomerResult(customer_id=f"cus_fake_{uuid4().hex[:12]}")

    def create_checkout_session(
        self,
        customer_id: str,
        amount_cents: int,
        currency: str,
        product_name: str,
        description: str,
        metadata: dict,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        self.calls.append(
            {
                "method": "create_checkout_session",
                "customer_id": customer_id,
                "amount_cents": amount_cents,
                "currency": currency,
                "product_name": product_name,
                "metadata": dict(metadata),
            }
        )
        if not self.should_succeed:
            raise GatewayError(self.failure_reason)

        session_id = f"cs_fake_{uuid4().hex[:16]}"
        return CheckoutSession(session_id=session_id, url=f"https://checkout.fake.test/pay/{session_id}")

    def refund_payment(self, payment_reference: str, amount_cents: int, transaction_id: str) -> RefundResult:
        self.calls.append(
            {
                "method": "refund_payment",
                "payment_reference": payment_reference,
                "amount_cents": amount_cents,
                "transaction_id": transaction_id,
            }
        )
        if not self.should_succeed:
            raise GatewayError(self.failure_reason)
        return RefundResult(refund_id=f"re_fake_{transaction_id}")

    def construct_webhook_event(self, payload: bytes, signature: str) -> GatewayEvent:
        if signature != TEST_SIGNATURE:
            raise WebhookSignatureError("No signatures found matching the expected signature for payload")
        try:
            event = json.loads(payload)
        except ValueError as exc:
            raise WebhookSignatureError("Invalid payload") from exc
        return parse_event(event)

    @staticmethod
    def webhook_payload(
        event_type: str,
        session_id: str | None = None,
        metadata: dict | None = None,
        payment_reference: str | None = None,
        failure_reason: str | None = None,
        event_id: str | None = None,
    ) -> bytes:
        """Build a Stripe-shaped webhook body."""
        payment_reference = payment_reference or f"pi_fake_{uuid4().hex[:12]}"
        if event_type.startswith("checkout.session."):
            obj = {"id": session_id, "object": "checkout.session", "payment_intent": payment_reference}
        elif event_type.startswith("payment_intent."):
            obj = {"id": payment_reference, "object": "payment_intent"}
        else:
            obj = {"id": f"ch_fake_{uuid4().hex[:12]}", "object": "charge", "payment_intent": payment_reference}

        obj["metadata"] = metadata or {}
        if failure_reason:
            obj["last_payment_error"] = {"message": failure_reason}

        event = {
            "id": event_id or f"evt_fake_{uuid4().hex[:16]}",
            "object": "event",
            "type": event_type,
            "data": {"object": obj},
        }
        return json.dumps(event).encode("utf-8")
