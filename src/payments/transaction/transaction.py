"""Transaction aggregate (Event Sourced): one payment through the gateway.

A transaction is either a listing fee (the artist pays to list an artwork)
or a sale (a buyer pays for an artwork, minus the platform commission for
the seller). Every state change is an event, giving a full audit trail of
what the gateway reported and when.

State Machine:
    PENDING → COMPLETED | FAILED
    FAILED → COMPLETED    (a late success after an expiry or decline)
    COMPLETED → REFUNDED

Webhooks arrive at least once and in any order, so every transition is
idempotent: repeating the current state, or a failure reported after
completion, is a no-op that returns False.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import apply
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from payments.domain import payments
from payments.transaction.events import (
    TransactionCompleted,
    TransactionFailed,
    TransactionRefunded,
    TransactionStarted,
)

CURRENCY = "eur"
LISTING_FEE_CENTS = 100
COMMISSION_RATE = 0.05


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class TransactionType(Enum):
    LISTING_FEE = "listing_fee"
    SALE = "sale"


class TransactionStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


_VALID_TRANSITIONS = {
    TransactionStatus.PENDING: {TransactionStatus.COMPLETED, TransactionStatus.FAILED},
    TransactionStatus.FAILED: {TransactionStatus.COMPLETED},
    TransactionStatus.COMPLETED: {TransactionStatus.REFUNDED},
    TransactionStatus.REFUNDED: set(),  # Terminal
}


def sale_amount_cents(price: float) -> int:
    return round(price * 100)


def commission_cents(amount_cents: int) -> int:
    return round(amount_cents * COMMISSION_RATE)


# ---------------------------------------------------------------------------
# Aggregate Root (Event Sourced)
# ---------------------------------------------------------------------------
@payments.aggregate(is_event_sourced=True)
class Transaction:
    transaction_type = String(choices=TransactionType, required=True)
    artwork_id = Identifier(required=True)
    artwork_title = String(max_length=100)
    buyer_id = Identifier()
    seller_id = Identifier(required=True)
    amount_cents = Integer(required=True, min_value=0)
    commission_cents = Integer(default=0, min_value=0)
    currency = String(max_length=3, default=CURRENCY)
    status = String(choices=TransactionStatus, default=TransactionStatus.PENDING.value)
    checkout_session_id = String(max_length=255)
    payment_reference = String(max_length=255)
    failure_reason = String(max_length=500)
    created_at = DateTime()
    completed_at = DateTime()
    failed_at = DateTime()
    refunded_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory methods
    # -------------------------------------------------------------------
    @classmethod
    def draft(cls):
        """A blank transaction whose identity can be handed to the gateway.

        Nothing is recorded until ``start`` raises TransactionStarted.
        """
        return cls._create_new()

    def start(
        self,
        transaction_type: str,
        artwork_id: str,
        artwork_title: str,
        seller_id: str,
        amount_cents: int,
        checkout_session_id: str,
        buyer_id: str | None = None,
    ) -> None:
        if transaction_type == TransactionType.SALE.value:
            if not buyer_id:
                raise ValidationError({"buyer_id": ["A sale needs a buyer"]})
            fee = commission_cents(amount_cents)
        else:
            fee = 0

        self.raise_(
            TransactionStarted(
                transaction_id=str(self.id),
                transaction_type=transaction_type,
                artwork_id=artwork_id,
                artwork_title=artwork_title,
                buyer_id=buyer_id,
                seller_id=seller_id,
                amount_cents=amount_cents,
                commission_cents=fee,
                currency=CURRENCY,
                checkout_session_id=checkout_session_id,
                started_at=datetime.now(UTC),
            )
        )

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _can_transition(self, target_status: TransactionStatus) -> bool:
        current = TransactionStatus(self.status)
        return target_status in _VALID_TRANSITIONS.get(current, set())

    # -------------------------------------------------------------------
    # Gateway outcomes
    # -------------------------------------------------------------------
    def complete(self, payment_reference: str | None = None) -> bool:
        if not self._can_transition(TransactionStatus.COMPLETED):
            return False

        self.raise_(
            TransactionCompleted(
                transaction_id=str(self.id),
                transaction_type=self.transaction_type,
                artwork_id=str(self.artwork_id),
                artwork_title=self.artwork_title,
                buyer_id=str(self.buyer_id) if self.buyer_id else None,
                seller_id=str(self.seller_id),
                amount_cents=self.amount_cents,
                commission_cents=self.commission_cents,
                currency=self.currency,
                payment_reference=payment_reference or self.payment_reference,
                completed_at=datetime.now(UTC),
            )
        )
        return True

    def fail(self, reason: str) -> bool:
        if not self._can_transition(TransactionStatus.FAILED):
            return False

        self.raise_(
            TransactionFailed(
                transaction_id=str(self.id),
                transaction_type=self.transaction_type,
                artwork_id=str(self.artwork_id),
                artwork_title=self.artwork_title,
                buyer_id=str(self.buyer_id) if self.buyer_id else None,
                seller_id=str(self.seller_id),
                amount_cents=self.amount_cents,
                currency=self.currency,
                reason=reason or "Payment failed",
                failed_at=datetime.now(UTC),
            )
        )
        return True

    def refund(self) -> bool:
        if not self._can_transition(TransactionStatus.REFUNDED):
            return False

        self.raise_(
            TransactionRefunded(
                transaction_id=str(self.id),
                transaction_type=self.transaction_type,
                artwork_id=str(self.artwork_id),
                buyer_id=str(self.buyer_id) if self.buyer_id else None,
                seller_id=str(self.seller_id),
                amount_cents=self.amount_cents,
                currency=self.currency,
                refunded_at=datetime.now(UTC),
            )
        )
        return True

    def involves(self, user_id) -> bool:
        return str(user_id) in (str(self.buyer_id), str(self.seller_id))

    # -------------------------------------------------------------------
    # @apply methods rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_started(self, event: TransactionStarted):
        self.id = event.transaction_id
        self.transaction_type = event.transaction_type
        self.artwork_id = event.artwork_id
        self.artwork_title = event.artwork_title
        self.buyer_id = event.buyer_id
        self.seller_id = event.seller_id
        self.amount_cents = event.amount_cents
        self.commission_cents = event.commission_cents
        self.currency = event.currency
        self.checkout_session_id = event.checkout_session_id
        self.status = TransactionStatus.PENDING.value
        self.created_at = event.started_at
        self.updated_at = event.started_at

    @apply
    def _on_completed(self, event: TransactionCompleted):
        self.status = TransactionStatus.COMPLETED.value
        self.payment_reference = event.payment_reference
        self.failure_reason = None
        self.completed_at = event.completed_at
        self.updated_at = event.completed_at

    @apply
    def _on_failed(self, event: TransactionFailed):
        self.status = TransactionStatus.FAILED.value
        self.failure_reason = event.reason
        self.failed_at = event.failed_at
        self.updated_at = event.failed_at

    @apply
    def _on_refunded(self, event: TransactionRefunded):
        self.status = TransactionStatus.REFUNDED.value
        self.refunded_at = event.refunded_at
        self.updated_at = event.refunded_at
