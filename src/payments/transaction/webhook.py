"""Gateway webhook reconciliation: command, handler and receipt log.

The gateway delivers each event at least once and in no guaranteed order.
A WebhookReceipt keyed by the provider's event id makes redelivery a no-op,
and the Transaction state machine ignores transitions that are stale, so
ownership transfer, ledger updates and notifications each happen once.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from payments.domain import logger, payments
from payments.projections.transaction_record import find_by_checkout_session, find_by_payment_reference
from payments.transaction.transaction import Transaction

COMPLETION_EVENTS = frozenset({"checkout.session.completed", "payment_intent.succeeded"})
FAILURE_EVENTS = frozenset(
    {
        "checkout.session.expired",
        "checkout.session.async_payment_failed",
        "payment_intent.payment_failed",
    }
)
REFUND_EVENTS = frozenset({"charge.refunded"})

_FAILURE_REASONS = {
    "checkout.session.expired": "Checkout session expired",
    "checkout.session.async_payment_failed": "Payment failed",
    "payment_intent.payment_failed": "Payment declined",
}


class WebhookOutcome(Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    NO_CHANGE = "no_change"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"
    UNMATCHED = "unmatched"


@payments.aggregate
class WebhookReceipt:
    """One processed gateway event. Never updated after it is written."""

    event_id = String(identifier=True, max_length=255)
    event_type = String(required=True, max_length=100)
    transaction_id = Identifier()
    outcome = String(choices=WebhookOutcome, required=True)
    received_at = DateTime(required=True)


@payments.command(part_of="Transaction")
class ProcessGatewayWebhook:
    event_id = String(required=True, max_length=255)
    event_type = String(required=True, max_length=100)
    session_id = String(max_length=255)
    payment_reference = String(max_length=255)
    metadata = Text()  # JSON object
    failure_reason = String(max_length=500)


def _find_transaction(command) -> Transaction | None:
    metadata = json.loads(command.metadata) if command.metadata else {}
    transaction_id = metadata.get("transaction_id")

    if not transaction_id and command.session_id:
        record = find_by_checkout_session(command.session_id)
        transaction_id = record.transaction_id if record else None

    # Refund events carry neither our metadata nor the checkout session
    if not transaction_id and command.payment_reference:
        record = find_by_payment_reference(command.payment_reference)
        transaction_id = record.transaction_id if record else None

    if not transaction_id:
        return None
    try:
        return current_domain.repository_for(Transaction).get(transaction_id)
    except ObjectNotFoundError:
        return None


@payments.command_handler(part_of=Transaction)
class GatewayWebhookHandler:
    @handle(ProcessGatewayWebhook)
    def process_gateway_webhook(self, command):
        receipts = current_domain.repository_for(WebhookReceipt)
        if receipts._dao.query.filter(event_id=command.event_id).all().total:
            logger.info("Duplicate webhook event acknowledged", event_id=command.event_id)
            return WebhookOutcome.DUPLICATE.value

        outcome, transaction = self._apply(command)

        receipts.add(
            WebhookReceipt(
                event_id=command.event_id,
                event_type=command.event_type,
                transaction_id=str(transaction.id) if transaction else None,
                outcome=outcome.value,
                received_at=datetime.now(UTC),
            )
        )
        logger.info(
            "Webhook event processed",
            event_id=command.event_id,
            event_type=command.event_type,
            transaction_id=str(transaction.id) if transaction else None,
            outcome=outcome.value,
        )
        return outcome.value

    def _apply(self, command) -> tuple[WebhookOutcome, Transaction | None]:
        handled = COMPLETION_EVENTS | FAILURE_EVENTS | REFUND_EVENTS
        if command.event_type not in handled:
            return WebhookOutcome.IGNORED, None

        transaction = _find_transaction(command)
        if transaction is None:
            logger.warning(
                "Webhook event matches no transaction",
                event_id=command.event_id,
                session_id=command.session_id,
            )
            return WebhookOutcome.UNMATCHED, None

        if command.event_type in COMPLETION_EVENTS:
            changed = transaction.complete(command.payment_reference)
            outcome = WebhookOutcome.COMPLETED
        elif command.event_type in FAILURE_EVENTS:
            reason = command.failure_reason or _FAILURE_REASONS[command.event_type]
            changed = transaction.fail(reason)
            outcome = WebhookOutcome.FAILED
        else:
            changed = transaction.refund()
            outcome = WebhookOutcome.REFUNDED

        if not changed:
            logger.info(
                "Stale webhook transition ignored",
                transaction_id=str(transaction.id),
                status=transaction.status,
                event_type=command.event_type,
            )
            return WebhookOutcome.NO_CHANGE, transaction

        current_domain.repository_for(Transaction).add(transaction)
        return outcome, transaction
