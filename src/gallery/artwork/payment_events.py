"""Inbound cross-domain event handler: Gallery reacts to Payments events.

Listing-fee transactions move the artwork's fee status; completed sale
transactions transfer ownership and extend the traceability chain. A paid
sale that cannot transfer ownership raises SaleRefused so the buyer is
refunded.
Handlers are idempotent per transaction id, so redelivered events are
harmless.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from gallery.artwork.artwork import Artwork, ListingFeeStatus
from gallery.domain import gallery
from shared.events.payments import (
    TransactionCompleted,
    TransactionFailed,
    TransactionRefunded,
    TransactionStarted,
)

logger = structlog.get_logger(__name__)

LISTING_FEE = "listing_fee"
SALE = "sale"

gallery.register_external_event(TransactionStarted, "Payments.TransactionStarted.v1")
gallery.register_external_event(TransactionCompleted, "Payments.TransactionCompleted.v1")
gallery.register_external_event(TransactionFailed, "Payments.TransactionFailed.v1")
gallery.register_external_event(TransactionRefunded, "Payments.TransactionRefunded.v1")


def _load(artwork_id):
    try:
        return current_domain.repository_for(Artwork).get(artwork_id)
    except ObjectNotFoundError:
        logger.warning("Payment event for unknown artwork", artwork_id=str(artwork_id))
        return None


def _update_fee(event, target) -> None:
    artwork = _load(event.artwork_id)
    if artwork is None:
        return
    if artwork.change_listing_fee_status(target, event.transaction_id):
        current_domain.repository_for(Artwork).add(artwork)
    else:
        logger.info(
            "Listing fee event ignored",
            artwork_id=str(event.artwork_id),
            transaction_id=str(event.transaction_id),
            current=artwork.listing_fee_status,
            target=target,
        )


@gallery.event_handler(part_of=Artwork, stream_category="payments::transaction")
class PaymentEventsHandler:
    """Applies payment outcomes to artworks."""

    @handle(TransactionStarted)
    def on_transaction_started(self, event: TransactionStarted) -> None:
        if event.transaction_type == LISTING_FEE:
            _update_fee(event, ListingFeeStatus.PENDING.value)

    @handle(TransactionCompleted)
    def on_transaction_completed(self, event: TransactionCompleted) -> None:
        if event.transaction_type == LISTING_FEE:
            _update_fee(event, ListingFeeStatus.PAID.value)
            return

        artwork = _load(event.artwork_id)
        if artwork is None:
            return

        try:
            changed = artwork.record_sale(
                buyer_id=event.buyer_id,
                transaction_id=event.transaction_id,
                price=event.amount_cents / 100,
            )
        except ValidationError as exc:
            # The buyer was charged but ownership cannot move
            reason = "; ".join(message for messages in exc.messages.values() for message in messages)
            logger.error(
                "Completed sale could not be applied",
                artwork_id=str(event.artwork_id),
                transaction_id=str(event.transaction_id),
                errors=exc.messages,
            )
            artwork.refuse_sale(buyer_id=event.buyer_id, transaction_id=event.transaction_id, reason=reason)
            current_domain.repository_for(Artwork).add(artwork)
            return

        if changed:
            current_domain.repository_for(Artwork).add(artwork)
        else:
            logger.info("Duplicate sale event ignored", transaction_id=str(event.transaction_id))

    @handle(TransactionFailed)
    def on_transaction_failed(self, event: TransactionFailed) -> None:
        if event.transaction_type == LISTING_FEE:
            _update_fee(event, ListingFeeStatus.FAILED.value)

    @handle(TransactionRefunded)
    def on_transaction_refunded(self, event: TransactionRefunded) -> None:
        logger.warning(
            "Transaction refunded; ownership is not reverted automatically",
            artwork_id=str(event.artwork_id),
            transaction_id=str(event.transaction_id),
            transaction_type=event.transaction_type,
        )
