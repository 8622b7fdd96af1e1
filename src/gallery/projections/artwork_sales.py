"""Artwork sales: one row per completed sale, the source for analytics."""

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, String
from protean.utils.globals import current_domain

from gallery.artwork.artwork import Artwork
from gallery.artwork.events import ArtworkSold
from gallery.domain import gallery


@gallery.projection
class ArtworkSale:
    transaction_id = Identifier(identifier=True, required=True)
    artwork_id = Identifier(required=True)
    artist_id = Identifier(required=True)
    artist_name = String(max_length=30)
    seller_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    title = String(required=True, max_length=100)
    medium = String(max_length=100)
    price = Float(required=True)
    sold_at = DateTime(required=True)


@gallery.projector(projector_for=ArtworkSale, aggregates=[Artwork])
class ArtworkSaleProjector:
    @on(ArtworkSold)
    def on_artwork_sold(self, event):
        artwork = current_domain.repository_for(Artwork).get(event.artwork_id)
        current_domain.repository_for(ArtworkSale).add(
            ArtworkSale(
                transaction_id=event.transaction_id,
                artwork_id=event.artwork_id,
                artist_id=event.artist_id,
                artist_name=artwork.artist_name,
                seller_id=event.seller_id,
                buyer_id=event.buyer_id,
                title=event.title,
                medium=event.medium,
                price=event.price,
                sold_at=event.sold_at,
            )
        )
