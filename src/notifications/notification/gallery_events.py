"""Inbound cross-domain event handler: Notifications reacts to Gallery events.

Tells artists about moderation decisions on their artworks. A sale is
confirmed to buyer and seller once ownership has actually moved, and a buyer
whose payment arrived after the artwork was already sold is told about the
refund instead.
"""

from notifications.domain import notifications
from notifications.notification.helpers import notify_user
from notifications.notification.notification import Notification, NotificationType
from protean.utils.mixins import handle
from shared.events.gallery import ArtworkApproved, ArtworkRejected, ArtworkSold, SaleRefused

notifications.register_external_event(ArtworkApproved, "Gallery.ArtworkApproved.v1")
notifications.register_external_event(ArtworkRejected, "Gallery.ArtworkRejected.v1")
notifications.register_external_event(ArtworkSold, "Gallery.ArtworkSold.v1")
notifications.register_external_event(SaleRefused, "Gallery.SaleRefused.v1")

COMMISSION_RATE = 0.05


def _earnings(price: float) -> str:
    cents = round(price * 100)
    return f"{(cents - round(cents * COMMISSION_RATE)) / 100:.2f}"


@notifications.event_handler(part_of=Notification, stream_category="gallery::artwork")
class GalleryEventsHandler:
    @handle(ArtworkApproved)
    def on_artwork_approved(self, event: ArtworkApproved) -> None:
        notify_user(
            event.artist_id,
            NotificationType.ARTWORK_APPROVED.value,
            {"artwork_title": event.title, "artwork_id": str(event.artwork_id)},
            source_event_type="Gallery.ArtworkApproved.v1",
            source_event_id=str(event.artwork_id),
        )

    @handle(ArtworkRejected)
    def on_artwork_rejected(self, event: ArtworkRejected) -> None:
        notify_user(
            event.artist_id,
            NotificationType.ARTWORK_REJECTED.value,
            {"artwork_title": event.title, "artwork_id": str(event.artwork_id), "reason": event.reason},
            source_event_type="Gallery.ArtworkRejected.v1",
            source_event_id=str(event.artwork_id),
        )

    @handle(ArtworkSold)
    def on_artwork_sold(self, event: ArtworkSold) -> None:
        context = {
            "artwork_title": event.title,
            "amount": f"{event.price:.2f}",
            "transaction_id": str(event.transaction_id),
        }
        source = {
            "source_event_type": "Gallery.ArtworkSold.v1",
            "source_event_id": str(event.transaction_id),
        }
        notify_user(event.buyer_id, NotificationType.PURCHASE_CONFIRMATION.value, context, **source)
        notify_user(
            event.seller_id,
            NotificationType.SALE_NOTIFICATION.value,
            {**context, "earnings": _earnings(event.price)},
            **source,
        )

    @handle(SaleRefused)
    def on_sale_refused(self, event: SaleRefused) -> None:
        notify_user(
            event.buyer_id,
            NotificationType.PURCHASE_REFUNDED.value,
            {"artwork_title": event.title, "transaction_id": str(event.transaction_id), "reason": event.reason},
            source_event_type="Gallery.SaleRefused.v1",
            source_event_id=str(event.transaction_id),
        )
