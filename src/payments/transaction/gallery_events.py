"""Inbound cross-domain event handler: Payments tracks Gallery artworks.

Keeps the ArtworkOffer view in step with artwork submissions, edits,
moderation, listing-fee status and sales, and refunds a paid sale that
Gallery refused because the artwork had already changed hands.

Cross-domain events are imported from shared.events.gallery and registered
as external events via payments.register_external_event().
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from payments.domain import payments
from payments.gateway import get_gateway
from payments.projections.artwork_offer import ArtworkOffer
from payments.transaction.transaction import Transaction, TransactionStatus
from shared.events.gallery import (
    ArtworkApproved,
    ArtworkRejected,
    ArtworkSold,
    ArtworkSubmitted,
    ArtworkUpdated,
    ArtworkWithdrawn,
    ListingFeeStatusChanged,
    SaleRefused,
)

logger = structlog.get_logger(__name__)

payments.register_external_event(ArtworkSubmitted, "Gallery.ArtworkSubmitted.v1")
payments.register_external_event(ArtworkUpdated, "Gallery.ArtworkUpdated.v1")
payments.register_external_event(ArtworkWithdrawn, "Gallery.ArtworkWithdrawn.v1")
payments.register_external_event(ArtworkApproved, "Gallery.ArtworkApproved.v1")
payments.register_external_event(ArtworkRejected, "Gallery.ArtworkRejected.v1")
payments.register_external_event(ListingFeeStatusChanged, "Gallery.ListingFeeStatusChanged.v1")
payments.register_external_event(ArtworkSold, "Gallery.ArtworkSold.v1")
payments.register_external_event(SaleRefused, "Gallery.SaleRefused.v1")


def _update(artwork_id, **changes) -> None:
    repo = current_domain.repository_for(ArtworkOffer)
    try:
        offer = repo.get(artwork_id)
    except ObjectNotFoundError:
        logger.warning("Gallery event for untracked artwork", artwork_id=str(artwork_id))
        return

    for field_name, value in changes.items():
        setattr(offer, field_name, value)
    repo.add(offer)


@payments.event_handler(part_of=Transaction, stream_category="gallery::artwork")
class GalleryArtworkEventHandler:
    """Mirrors artwork state needed to open checkouts."""

    @handle(ArtworkSubmitted)
    def on_artwork_submitted(self, event: ArtworkSubmitted) -> None:
        repo = current_domain.repository_for(ArtworkOffer)
        if repo._dao.query.filter(artwork_id=event.artwork_id).all().total:
            return  # Redelivered

        repo.add(
            ArtworkOffer(
                artwork_id=event.artwork_id,
                artist_id=event.artist_id,
                current_owner_id=event.artist_id,
                title=event.title,
                price=event.price,
                status=event.status,
                listing_fee_status=event.listing_fee_status,
                is_sold=False,
                updated_at=event.submitted_at,
            )
        )

    @handle(ArtworkUpdated)
    def on_artwork_updated(self, event: ArtworkUpdated) -> None:
        _update(event.artwork_id, title=event.title, price=event.price, updated_at=event.updated_at)

    @handle(ArtworkWithdrawn)
    def on_artwork_withdrawn(self, event: ArtworkWithdrawn) -> None:
        _update(event.artwork_id, status="withdrawn", updated_at=event.withdrawn_at)

    @handle(ArtworkApproved)
    def on_artwork_approved(self, event: ArtworkApproved) -> None:
        _update(event.artwork_id, status="approved", updated_at=event.approved_at)

    @handle(ArtworkRejected)
    def on_artwork_rejected(self, event: ArtworkRejected) -> None:
        _update(event.artwork_id, status="rejected", updated_at=event.rejected_at)

    @handle(ListingFeeStatusChanged)
    def on_listing_fee_status_changed(self, event: ListingFeeStatusChanged) -> None:
        _update(event.artwork_id, listing_fee_status=event.listing_fee_status, updated_at=event.changed_at)

    @handle(ArtworkSold)
    def on_artwork_sold(self, event: ArtworkSold) -> None:
        _update(
            event.artwork_id,
            current_owner_id=event.buyer_id,
            is_sold=True,
            updated_at=event.sold_at,
        )

    @handle(SaleRefused)
    def on_sale_refused(self, event: SaleRefused) -> None:
        repo = current_domain.repository_for(Transaction)
        transaction = repo.get(event.transaction_id)
        if TransactionStatus(transaction.status) != TransactionStatus.COMPLETED:
            logger.info(
                "Refused sale already settled",
                transaction_id=str(event.transaction_id),
                status=transaction.status,
            )
            return

        refund = get_gateway().refund_payment(
            payment_reference=transaction.payment_reference,
            amount_cents=transaction.amount_cents,
            transaction_id=str(transaction.id),
        )
        transaction.refund()
        repo.add(transaction)
        logger.warning(
            "Refused sale refunded",
            artwork_id=str(event.artwork_id),
            transaction_id=str(transaction.id),
            refund_id=refund.refund_id,
            reason=event.reason,
        )
