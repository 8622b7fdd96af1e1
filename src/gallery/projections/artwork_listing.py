"""Artwork listing: denormalized rows for browse, search and stats.

Every artwork event refreshes the row from the aggregate, so the row always
mirrors the latest committed state.
"""

import json
from functools import reduce
from operator import or_

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.query import Q

from gallery.artwork.artwork import Artwork, ArtworkStatus
from gallery.artwork.events import (
    ArtworkApproved,
    ArtworkRejected,
    ArtworkSold,
    ArtworkSubmitted,
    ArtworkUpdated,
    ArtworkWithdrawn,
    ListingFeeStatusChanged,
)
from gallery.domain import gallery
from shared.paging import Page, iterate, paginate

SORTABLE_FIELDS = {"created_at", "price", "title", "year", "updated_at"}


@gallery.projection
class ArtworkListing:
    artwork_id = Identifier(identifier=True, required=True)
    artist_id = Identifier(required=True)
    artist_name = String(max_length=30)
    current_owner_id = Identifier(required=True)
    title = String(required=True, max_length=100)
    description = Text()
    price = Float(required=True)
    currency = String(max_length=3, default="EUR")
    medium = String(max_length=100)
    tags = Text()  # JSON list
    tag_index = Text()  # "|tag1|tag2|" for containment lookups
    images = Text()  # JSON list
    year = Integer()
    is_original = Boolean(default=True)
    status = String(required=True, max_length=20)
    listing_fee_status = String(required=True, max_length=20)
    is_sold = Boolean(default=False)
    search_text = Text()
    created_at = DateTime()
    updated_at = DateTime()
    sold_at = DateTime()


def _refresh(artwork_id) -> None:
    artwork = current_domain.repository_for(Artwork).get(artwork_id)
    tags = artwork.tag_list()
    values = dict(
        artist_id=artwork.artist_id,
        artist_name=artwork.artist_name,
        current_owner_id=artwork.current_owner_id,
        title=artwork.title,
        description=artwork.description,
        price=artwork.price,
        currency=artwork.currency,
        medium=artwork.medium,
        tags=json.dumps(tags),
        tag_index="|" + "|".join(tags) + "|" if tags else "||",
        images=artwork.images,
        year=artwork.year,
        is_original=artwork.is_original,
        status=artwork.status,
        listing_fee_status=artwork.listing_fee_status,
        is_sold=artwork.is_sold(),
        search_text=" ".join(
            part for part in (artwork.title, artwork.description, artwork.medium, " ".join(tags)) if part
        ).lower(),
        created_at=artwork.created_at,
        updated_at=artwork.updated_at,
        sold_at=artwork.sold_at,
    )

    repo = current_domain.repository_for(ArtworkListing)
    try:
        row = repo.get(artwork.id)
    except ObjectNotFoundError:
        repo.add(ArtworkListing(artwork_id=artwork.id, **values))
        return

    for field_name, value in values.items():
        setattr(row, field_name, value)
    repo.add(row)


@gallery.projector(projector_for=ArtworkListing, aggregates=[Artwork])
class ArtworkListingProjector:
    @on(ArtworkSubmitted)
    def on_submitted(self, event):
        _refresh(event.artwork_id)

    @on(ArtworkUpdated)
    def on_updated(self, event):
        _refresh(event.artwork_id)

    @on(ArtworkWithdrawn)
    def on_withdrawn(self, event):
        _refresh(event.artwork_id)

    @on(ArtworkApproved)
    def on_approved(self, event):
        _refresh(event.artwork_id)

    @on(ArtworkRejected)
    def on_rejected(self, event):
        _refresh(event.artwork_id)

    @on(ListingFeeStatusChanged)
    def on_fee_status_changed(self, event):
        _refresh(event.artwork_id)

    @on(ArtworkSold)
    def on_sold(self, event):
        _refresh(event.artwork_id)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def _query():
    return current_domain.repository_for(ArtworkListing)._dao.query


def browse(
    status=ArtworkStatus.APPROVED.value,
    min_price=None,
    max_price=None,
    artist_id=None,
    owner_id=None,
    medium=None,
    tags=None,
    search=None,
    include_sold=True,
    sort="-created_at",
    page=1,
    limit=20,
) -> Page:
    """Filtered, sorted, paginated listing rows.

    ``tags`` matches rows carrying any of the given tags.
    """
    filters = {}
    if status:
        filters["status"] = status
    if min_price is not None:
        filters["price__gte"] = min_price
    if max_price is not None:
        filters["price__lte"] = max_price
    if artist_id:
        filters["artist_id"] = artist_id
    if owner_id:
        filters["current_owner_id"] = owner_id
    if medium:
        filters["medium"] = medium
    if search:
        filters["search_text__contains"] = search.strip().lower()
    if not include_sold:
        filters["is_sold"] = False
    tag_filters = [Q(tag_index__contains=f"|{tag.strip().lower()}|") for tag in tags or [] if tag.strip()]

    if sort.lstrip("-") not in SORTABLE_FIELDS:
        sort = "-created_at"

    query = _query().filter(**filters)
    if tag_filters:
        query = query.filter(reduce(or_, tag_filters))
    query = query.order_by(sort)
    return paginate(query, page=page, limit=limit)


def artwork_stats(artist_id=None) -> dict:
    """Counts by status plus price statistics, excluding withdrawn artworks."""
    stats = {
        "total": 0,
        "approved": 0,
        "pending": 0,
        "rejected": 0,
        "sold": 0,
        "average_price": 0.0,
        "total_value": 0.0,
    }

    query = _query().filter(artist_id=artist_id) if artist_id else _query()
    for row in iterate(query):
        if row.status == ArtworkStatus.WITHDRAWN.value:
            continue
        stats["total"] += 1
        if row.status in stats:
            stats[row.status] += 1
        if row.is_sold:
            stats["sold"] += 1
        stats["total_value"] += row.price or 0.0

    if stats["total"]:
        stats["average_price"] = round(stats["total_value"] / stats["total"], 2)
    stats["total_value"] = round(stats["total_value"], 2)
    return stats
