"""Domain events for the Transaction aggregate.

Events are versioned, immutable facts. They rebuild the aggregate (event
sourcing), feed the TransactionRecord projection, and are consumed by the
Gallery and Notifications contexts through the shared contracts in
shared.events.payments.
"""

from protean.fields import DateTime, Identifier, Integer, String

from payments.domain import payments


@payments.event(part_of="Transaction")
class TransactionStarted:
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


@payments.event(part_of="Transaction")
class TransactionCompleted:
    """The gateway confirmed the payment."""

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


@payments.event(part_of="Transaction")
class TransactionFailed:
    """The checkout expired or the payment was declined."""

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


@payments.event(part_of="Transaction")
class TransactionRefunded:
    """A completed payment was refunded at the gateway."""

    __version__ = 1

    transaction_id = Identifier(required=True)
    transaction_type = String(required=True)
    artwork_id = Identifier(required=True)
    buyer_id = Identifier()
    seller_id = Identifier(required=True)
    amount_cents = Integer(required=True)
    currency = String(required=True)
    refunded_at = DateTime(required=True)
