"""Stripe payment gateway adapter.

Uses the stripe-python SDK for hosted Checkout Sessions. Webhook signatures
are verified with ``stripe.Webhook.construct_event`` against the endpoint's
signing secret.
"""

import json

import stripe
import structlog

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

logger = structlog.get_logger(__name__)


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    def __init__(self, api_key: str, webhook_secret: str) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        stripe.api_key = api_key

    def ensure_customer(self, user_id: str, email: str, username: str | None = None) -> CustomerResult:
        try:
            customer = stripe.Customer.create(
                email=email,
                name=username,
                metadata={"user_id": str(user_id)},
            )
        except stripe.StripeError as exc:
            logger.error("Stripe customer creation failed", user_id=str(user_id), error=str(exc))
            raise GatewayError("Failed to create payment customer") from exc
        return CustomerResult(customer_id=customer.id)

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
        try:
            session = stripe.checkout.Session.create(
                mode="payment",
                payment_method_types=["card"],
                customer=customer_id,
                line_items=[
                    {
                        "price_data": {
                            "currency": currency,
                            "product_data": {"name": product_name, "description": description},
                            "unit_amount": amount_cents,
                        },
                        "quantity": 1,
                    }
                ],
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
                payment_intent_data={"metadata": metadata},
                idempotency_key=f"checkout_{metadata['transaction_id']}",
            )
        except stripe.StripeError as exc:
            logger.error("Stripe checkout session failed", error=str(exc), error_type=type(exc).__name__)
            raise GatewayError("Failed to create checkout session") from exc
        return CheckoutSession(session_id=session.id, url=session.url)

    def refund_payment(self, payment_reference: str, amount_cents: int, transaction_id: str) -> RefundResult:
        try:
            refund = stripe.Refund.create(
                payment_intent=payment_reference,
                amount=amount_cents,
                metadata={"transaction_id": transaction_id},
                idempotency_key=f"refund_{transaction_id}",
            )
        except stripe.StripeError as exc:
            logger.error("Stripe refund failed", transaction_id=transaction_id, error=str(exc))
            raise GatewayError("Failed to refund payment") from exc
        return RefundResult(refund_id=refund.id)

    def construct_webhook_event(self, payload: bytes, signature: str) -> GatewayEvent:
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except ValueError as exc:
            raise WebhookSignatureError("Invalid payload") from exc
        except stripe.SignatureVerificationError as exc:
            raise WebhookSignatureError(str(exc)) from exc
        # Signature verified; the raw body carries the same event as a plain dict
        return parse_event(json.loads(payload))
