"""Domain events for the Artwork aggregate.

Shapes match the contracts in src/shared/events/gallery.py; payments and
notifications consume them across the event pipeline.
"""

from protean.fields import DateTime, Float, Identifier, String

from gallery.domain import gallery


@gallery.event(part_of="Artwork")
class ArtworkSubmitted:
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


@gallery.event(part_of="Artwork")
class ArtworkUpdated:
    """Listing details of an artwork changed."""

    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    title = String(required=True)
    price = Float(required=True)
    medium = String()
    updated_at = DateTime(required=True)


@gallery.event(part_of="Artwork")
class ArtworkWithdrawn:
    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    withdrawn_at = DateTime(required=True)


@gallery.event(part_of="Artwork")
class ArtworkApproved:
    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    title = String(required=True)
    approved_at = DateTime(required=True)


@gallery.event(part_of="Artwork")
class ArtworkRejected:
    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    title = String(required=True)
    reason = String(required=True)
    rejected_at = DateTime(required=True)


@gallery.event(part_of="Artwork")
class ListingFeeStatusChanged:
    """The listing fee moved to pending, paid or failed."""

    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    listing_fee_status = String(required=True)
    transaction_id = Identifier()
    changed_at = DateTime(required=True)


@gallery.event(part_of="Artwork")
class ArtworkSold:
    """Ownership moved to a buyer after a completed sale transaction."""

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


@gallery.event(part_of="Artwork")
class SaleRefused:
    """A sale was paid for but ownership could not move, so the buyer is owed a refund."""

    __version__ = 1

    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    title = String(required=True)
    transaction_id = Identifier(required=True)
    reason = String(required=True)
    refused_at = DateTime(required=True)
