"""Transaction records: denormalized rows for history, stats and admin listing."""

from datetime import UTC, datetime, timedelta

from protean.core.projector import on
from protean.fields import DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from payments.domain import payments
from payments.transaction.events import (
    TransactionCompleted,
    TransactionFailed,
    TransactionRefunded,
    TransactionStarted,
)
from payments.transaction.transaction import Transaction, TransactionStatus, TransactionType
from shared.paging import Page, iterate, paginate


@payments.projection
class TransactionRecord:
    transaction_id = Identifier(identifier=True, required=True)
    transaction_type = String(required=True, max_length=20)
    artwork_id = Identifier(required=True)
    artwork_title = String(max_length=100)
    buyer_id = Identifier()
    seller_id = Identifier(required=True)
    parties = Text()  # "|buyer_id|seller_id|" for containment lookups
    amount_cents = Integer(required=True)
    commission_cents = Integer(default=0)
    currency = String(max_length=3)
    status = String(required=True, max_length=20)
    checkout_session_id = String(max_length=255)
    payment_reference = String(max_length=255)
    failure_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()
    completed_at = DateTime()


def _parties(buyer_id, seller_id) -> str:
    return "|" + "|".join(str(party) for party in (buyer_id, seller_id) if party) + "|"


@payments.projector(projector_for=TransactionRecord, aggregates=[Transaction])
class TransactionRecordProjector:
    @on(TransactionStarted)
    def on_transaction_started(self, event):
        current_domain.repository_for(TransactionRecord).add(
            TransactionRecord(
                transaction_id=event.transaction_id,
                transaction_type=event.transaction_type,
                artwork_id=event.artwork_id,
                artwork_title=event.artwork_title,
                buyer_id=event.buyer_id,
                seller_id=event.seller_id,
                parties=_parties(event.buyer_id, event.seller_id),
                amount_cents=event.amount_cents,
                commission_cents=event.commission_cents,
                currency=event.currency,
                status=TransactionStatus.PENDING.value,
                checkout_session_id=event.checkout_session_id,
                created_at=event.started_at,
                updated_at=event.started_at,
            )
        )

    @on(TransactionCompleted)
    def on_transaction_completed(self, event):
        repo = current_domain.repository_for(TransactionRecord)
        record = repo.get(event.transaction_id)
        record.status = TransactionStatus.COMPLETED.value
        record.payment_reference = event.payment_reference
        record.failure_reason = None
        record.completed_at = event.completed_at
        record.updated_at = event.completed_at
        repo.add(record)

    @on(TransactionFailed)
    def on_transaction_failed(self, event):
        repo = current_domain.repository_for(TransactionRecord)
        record = repo.get(event.transaction_id)
        record.status = TransactionStatus.FAILED.value
        record.failure_reason = event.reason
        record.updated_at = event.failed_at
        repo.add(record)

    @on(TransactionRefunded)
    def on_transaction_refunded(self, event):
        repo = current_domain.repository_for(TransactionRecord)
        record = repo.get(event.transaction_id)
        record.status = TransactionStatus.REFUNDED.value
        record.updated_at = event.refunded_at
        repo.add(record)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def _query():
    return current_domain.repository_for(TransactionRecord)._dao.query


def find_by_checkout_session(session_id: str) -> TransactionRecord | None:
    records = _query().filter(checkout_session_id=session_id).all().items
    return records[0] if records else None


def find_by_payment_reference(payment_reference: str) -> TransactionRecord | None:
    records = _query().filter(payment_reference=payment_reference).all().items
    return records[0] if records else None


def open_checkouts(artwork_id, transaction_type: str, within: timedelta) -> list[TransactionRecord]:
    """Pending transactions of one type for an artwork started inside the window."""
    since = datetime.now(UTC) - within
    return (
        _query()
        .filter(
            artwork_id=artwork_id,
            transaction_type=transaction_type,
            status=TransactionStatus.PENDING.value,
            created_at__gte=since,
        )
        .all()
        .items
    )


def list_transactions(
    user_id=None,
    transaction_type=None,
    status=None,
    page=1,
    limit=10,
) -> Page:
    """Newest first. With ``user_id``, only transactions where the user is buyer or seller."""
    filters = {}
    if user_id:
        filters["parties__contains"] = f"|{user_id}|"
    if transaction_type and transaction_type != "all":
        filters["transaction_type"] = transaction_type
    if status and status != "all":
        filters["status"] = status

    query = _query().filter(**filters).order_by("-created_at")
    return paginate(query, page=page, limit=limit)


def payment_stats(user_id) -> dict:
    """Totals over the user's completed transactions, amounts in EUR.

    ``total_spent`` counts purchases and listing fees paid. ``total_earned``
    counts sales net of the platform commission.
    """
    stats = {
        "total_transactions": 0,
        "total_spent": 0,
        "total_earned": 0,
        "sales_count": 0,
        "purchases_count": 0,
        "listing_fees_count": 0,
    }
    query = _query().filter(parties__contains=f"|{user_id}|", status=TransactionStatus.COMPLETED.value)

    for record in iterate(query):
        stats["total_transactions"] += 1
        if record.transaction_type == TransactionType.LISTING_FEE.value:
            stats["listing_fees_count"] += 1
            stats["total_spent"] += record.amount_cents
        elif str(record.buyer_id) == str(user_id):
            stats["purchases_count"] += 1
            stats["total_spent"] += record.amount_cents
        else:
            stats["sales_count"] += 1
            stats["total_earned"] += record.amount_cents - (record.commission_cents or 0)

    stats["total_spent"] = stats["total_spent"] / 100
    stats["total_earned"] = stats["total_earned"] / 100
    return stats


def transaction_summary() -> dict:
    """Platform-wide counts by status and revenue, amounts in EUR."""
    summary = {
        "total": 0,
        "pending": 0,
        "completed": 0,
        "failed": 0,
        "refunded": 0,
        "sales_volume": 0,
        "platform_revenue": 0,
    }
    for record in iterate(_query()):
        summary["total"] += 1
        summary[record.status] += 1
        if record.status != TransactionStatus.COMPLETED.value:
            continue
        if record.transaction_type == TransactionType.SALE.value:
            summary["sales_volume"] += record.amount_cents
            summary["platform_revenue"] += record.commission_cents or 0
        else:
            summary["platform_revenue"] += record.amount_cents

    summary["sales_volume"] = summary["sales_volume"] / 100
    summary["platform_revenue"] = summary["platform_revenue"] / 100
    return summary
