"""Cross-domain event contracts for Gallery domain events.

The source-of-truth events are in src/gallery/artwork/events.py. Payments
keeps its local ArtworkOffer read model up to date from these and refunds
refused sales. Notifications tells artists about moderation decisions and
confirms sales to both parties.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String


class ArtworkSubmitted(BaseEvent):
    """An artist submitted a new artwork for listing."""

    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    title = String(required=True)
    price = Float(required=True)
    medium = String()
    status = String(required=True)
    listing_fee_status = String(required=True)
    submitted_at = DateTime(required=True)


class ArtworkUpdated(BaseEvent):
    """Listing details of an artwork changed."""

    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    title = String(required=True)
    price = Float(required=True)
    medium = String()
    updated_at = DateTime(required=True)


class ArtworkWithdrawn(BaseEvent):
    """The owner removed an unsold artwork from the marketplace."""

    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    withdrawn_at = DateTime(required=True)


class ArtworkApproved(BaseEvent):
    """An administrator approved an artwork for public listing."""

    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    title = String(required=True)
    approved_at = DateTime(required=True)


class ArtworkRejected(BaseEvent):
    """An administrator rejected an artwork."""

    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    title = String(required=True)
    reason = String(required=True)
    rejected_at = DateTime(required=True)


class ListingFeeStatusChanged(BaseEvent):
    """The listing fee status of an artwork moved to a new state."""

    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    listing_fee_status = String(required=True)
    transaction_id = Identifier()
    changed_at = DateTime(required=True)


class ArtworkSold(BaseEvent):
    """Ownership of an artwork was transferred to a buyer after payment."""

    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    title = String(required=True)
    medium = String()
    price = Float(required=True)
    transaction_id = Identifier(required=True)
    sold_at = DateTime(required=True)


class SaleRefused(BaseEvent):
    """A paid sale could not transfer ownership; the buyer must be refunded."""

    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    title = String(required=True)
    transaction_id = Identifier(required=True)
    reason = String(required=True)
    refused_at = DateTime(required=True)
