"""Inbound cross-domain event handler: Notifications reacts to Payments events.

A completed listing fee is confirmed to the artist. A failed payment is
reported to whoever was paying. Completed sales are confirmed from Gallery's
ArtworkSold instead, since only that event proves ownership moved.
"""

from notifications.domain import notifications
from notifications.notification.helpers import notify_user
from notifications.notification.notification import Notification, NotificationType
from protean.utils.mixins import handle
from shared.events.payments import TransactionCompleted, TransactionFailed

notifications.register_external_event(TransactionCompleted, "Payments.TransactionCompleted.v1")
notifications.register_external_event(TransactionFailed, "Payments.TransactionFailed.v1")


def _euros(cents: int) -> str:
    return f"{cents / 100:.2f}"


@notifications.event_handler(part_of=Notification, stream_category="payments::transaction")
class PaymentEventsHandler:
    @handle(TransactionCompleted)
    def on_transaction_completed(self, event: TransactionCompleted) -> None:
        if event.transaction_type != "listing_fee":
            return

        notify_user(
            event.seller_id,
            NotificationType.LISTING_FEE_CONFIRMATION.value,
            {
                "artwork_title": event.artwork_title,
                "amount": _euros(event.amount_cents),
                "transaction_id": str(event.transaction_id),
            },
            source_event_type="Payments.TransactionCompleted.v1",
            source_event_id=str(event.transaction_id),
        )

    @handle(TransactionFailed)
    def on_transaction_failed(self, event: TransactionFailed) -> None:
        # The buyer pays for a sale; the artist pays the listing fee
        payer_id = event.buyer_id or event.seller_id
        notify_user(
            payer_id,
            NotificationType.PAYMENT_FAILED.value,
            {
                "artwork_title": event.artwork_title,
                "transaction_type": event.transaction_type,
                "reason": event.reason,
            },
            source_event_type="Payments.TransactionFailed.v1",
            source_event_id=f"{event.transaction_id}:{event.failed_at.isoformat()}",
        )
