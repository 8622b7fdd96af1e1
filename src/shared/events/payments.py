"""Cross-domain event contracts for Payments domain events.

These classes define the event shape for consumption by other domains
(Gallery transfers ownership and tracks listing fees, Notifications sends
confirmation emails). They are registered as external events via
domain.register_external_event() with matching __type__ strings.

The source-of-truth events are in src/payments/transaction/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, Integer, String


class TransactionStarted(BaseEvent):
    """A checkout session was opened and a pending transaction recorded."""

    __version__ = 1

    transaction_id = Identifier(required=True)
    transaction_type = String(required=True)
    artwork_id = Identifier(required=True)
    artwork_title = String()
    buyer_id = Identifier()
    seller_id = Identifier(required=True)
    amount_cents = Integer(required=True)
    commission_cents = Integer(required=True)
    currency = String(required=True)
    checkout_session_id = String(required=True)
    started_at = DateTime(required=True)


class TransactionCompleted(BaseEvent):
    """The gateway confirmed the payment for a transaction."""

    __version__ = 1

    transaction_id = Identifier(required=True)
    transaction_type = String(required=True)
    artwork_id = Identifier(required=True)
    artwork_title = String()
    buyer_id = Identifier()
    seller_id = Identifier(required=True)
    amount_cents = Integer(required=True)
    commission_cents = Integer(required=True)
    currency = String(required=True)
    payment_reference = String()
    completed_at = DateTime(required=True)


class TransactionFailed(BaseEvent):
    """The gateway reported that the payment for a transaction failed."""

    __version__ = 1

    transaction_id = Identifier(required=True)
    transaction_type = String(required=True)
    artwork_id = Identifier(required=True)
    artwork_title = String()
    buyer_id = Identifier()
    seller_id = Identifier(required=True)
    amount_cents = Integer(required=True)
    currency = String(required=True)
    reason = String(required=True)
    failed_at = DateTime(required=True)


class TransactionRefunded(BaseEvent):
    """A completed transaction was refunded at the gateway."""

    __version__ = 1

    transaction_id = Identifier(required=True)
    transaction_type = String(required=True)
    artwork_id = Identifier(required=True)
    buyer_id = Identifier()
    seller_id = Identifier(required=True)
    amount_cents = Integer(required=True)
    currency = String(required=True)
    refunded_at = DateTime(required=True)
