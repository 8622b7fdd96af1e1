"""Payment gateway port (abstract interface).

Defines the contract every gateway adapter implements, so the FakeGateway
(development and tests) and the StripeGateway (production) can be swapped
without touching domain or application code. Webhook payloads follow the
Stripe event shape: ``{"id", "type", "data": {"object": {...}}}``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class GatewayError(Exception):
    """The gateway refused or failed a request."""


class WebhookSignatureError(Exception):
    """A webhook payload could not be authenticated or parsed."""


@dataclass(frozen=True)
class CustomerResult:
    customer_id: str


@dataclass(frozen=True)
class CheckoutSession:
    """A hosted checkout page the payer is redirected to."""

    session_id: str
    url: str


@dataclass(frozen=True)
class RefundResult:
    refund_id: str


@dataclass(frozen=True)
class GatewayEvent:
    """A verified webhook event, reduced to what reconciliation needs."""

    event_id: str
    event_type: str
    session_id: str | None = None
    payment_reference: str | None = None
    metadata: dict = field(default_factory=dict)
    failure_reason: str | None = None


def parse_event(event: dict) -> GatewayEvent:
    """Reduce a Stripe-shaped event dict to a GatewayEvent."""
    event_type = event.get("type", "")
    obj = (event.get("data") or {}).get("object") or {}
    metadata = dict(obj.get("metadata") or {})

    if event_type.startswith("checkout.session."):
        session_id = obj.get("id")
        payment_reference = obj.get("payment_intent")
    elif event_type.startswith("payment_intent."):
        session_id = None
        payment_reference = obj.get("id")
    else:
        session_id = None
        payment_reference = obj.get("payment_intent") or obj.get("id")

    failure_reason = None
    last_error = obj.get("last_payment_error")
    if last_error:
        failure_reason = last_error.get("message")

    return GatewayEvent(
        event_id=event.get("id", ""),
        event_type=event_type,
        session_id=session_id,
        payment_reference=payment_reference,
        metadata=metadata,
        failure_reason=failure_reason,
    )


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def ensure_customer(self, user_id: str, email: str, username: str | None = None) -> CustomerResult:
        """Create a customer record at the gateway for a platform user."""
        ...

    @abstractmethod
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
        """Open a hosted checkout session for a single line item."""
        ...

    @abstractmethod
    def construct_webhook_event(self, payload: bytes, signature: str) -> GatewayEvent:
        """Authenticate a webhook payload and parse it.

        Raises WebhookSignatureError when the signature or payload is invalid.
        """
        ...

    @abstractmethod
    def refund_payment(self, payment_reference: str, amount_cents: int, transaction_id: str) -> RefundResult:
        """Refund a captured payment in full. Repeat calls for one transaction refund once."""
        ...
