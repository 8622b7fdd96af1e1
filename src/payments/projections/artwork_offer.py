"""Artwork offer: Payments' local view of what an artwork costs and who owns it.

Checkout decisions (is it approved, sold, owned by the caller, is the fee
already paid) read this view instead of calling into Gallery. It is kept
current by GalleryArtworkEventHandler.
"""

from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Identifier, String
from protean.utils.globals import current_domain

from payments.domain import payments


@payments.projection
class ArtworkOffer:
    artwork_id = Identifier(identifier=True, required=True)
    artist_id = Identifier(required=True)
    current_owner_id = Identifier(required=True)
    title = String(max_length=100)
    price = Float(required=True)
    status = String(required=True, max_length=20)
    listing_fee_status = String(required=True, max_length=20)
    is_sold = Boolean(default=False)
    updated_at = DateTime()


def find_offer(artwork_id) -> ArtworkOffer:
    """Raise ObjectNotFoundError with a readable message when the artwork is unknown."""
    try:
        return current_domain.repository_for(ArtworkOffer).get(artwork_id)
    except ObjectNotFoundError as exc:
        raise ObjectNotFoundError(f"Artwork with id `{artwork_id}` does not exist.") from exc
