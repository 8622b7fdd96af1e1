"""FastAPI endpoints for the Gallery domain."""

import json

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from gallery.analytics import (
    DEFAULT_LIMIT,
    DEFAULT_PERIOD,
    MAX_LIMIT,
    sales_report,
    top_selling_artists,
    top_selling_artworks,
    top_selling_categories,
)
from gallery.api.schemas import (
    ArtistRanking,
    ArtworkDetail,
    ArtworkIdResponse,
    ArtworkListResponse,
    ArtworkRanking,
    ArtworkStatsResponse,
    ArtworkSummary,
    CategoryRanking,
    DimensionsSchema,
    EditionSchema,
    PaginationMeta,
    ProvenanceResponse,
    RejectArtworkRequest,
    SalesReportResponse,
    StatusResponse,
    SubmitArtworkRequest,
    TraceabilityRecordResponse,
    UpdateArtworkRequest,
)
from gallery.artwork.artwork import Artwork, ArtworkStatus
from gallery.artwork.editing import UpdateArtwork, WithdrawArtwork
from gallery.artwork.moderation import ApproveArtwork, RejectArtwork
from gallery.artwork.submission import SubmitArtwork
from gallery.projections.artwork_listing import artwork_stats, browse
from shared.auth import Principal, get_current_principal, get_optional_principal, require_admin, require_role
from shared.paging import Page


def _summary(row) -> ArtworkSummary:
    return ArtworkSummary(
        artwork_id=str(row.artwork_id),
        title=row.title,
        price=row.price,
        currency=row.currency,
        medium=row.medium,
        tags=json.loads(row.tags) if row.tags else [],
        images=json.loads(row.images) if row.images else [],
        artist_id=str(row.artist_id),
        artist_name=row.artist_name,
        current_owner_id=str(row.current_owner_id),
        status=row.status,
        listing_fee_status=row.listing_fee_status,
        is_sold=row.is_sold,
        created_at=row.created_at,
    )


def _listing(result: Page) -> ArtworkListResponse:
    return ArtworkListResponse(
        artworks=[_summary(row) for row in result.items],
        pagination=PaginationMeta(**result.meta()),
    )


def _detail(artwork: Artwork) -> ArtworkDetail:
    return ArtworkDetail(
        artwork_id=str(artwork.id),
        title=artwork.title,
        description=artwork.description,
        price=artwork.price,
        currency=artwork.currency,
        medium=artwork.medium,
        tags=artwork.tag_list(),
        images=artwork.image_list(),
        artist_id=str(artwork.artist_id),
        artist_name=artwork.artist_name,
        current_owner_id=str(artwork.current_owner_id),
        status=artwork.status,
        listing_fee_status=artwork.listing_fee_status,
        is_sold=artwork.is_sold(),
        created_at=artwork.created_at,
        dimensions=(
            DimensionsSchema(
                width=artwork.dimensions.width,
                height=artwork.dimensions.height,
                unit=artwork.dimensions.unit,
            )
            if artwork.dimensions
            else None
        ),
        year=artwork.year,
        is_original=artwork.is_original,
        edition=(
            EditionSchema(number=artwork.edition.number, total=artwork.edition.total)
            if artwork.edition
            else None
        ),
        approved_at=artwork.approved_at,
        rejection_reason=artwork.rejection_reason,
        listing_fee_paid_at=artwork.listing_fee_paid_at,
        sold_at=artwork.sold_at,
        updated_at=artwork.updated_at,
    )


def _visible_artwork(artwork_id: str, principal: Principal | None) -> Artwork:
    """Load an artwork, hiding non-public ones from everyone but their artist, owner and admins."""
    artwork = current_domain.repository_for(Artwork).get(artwork_id)
    if artwork.status == ArtworkStatus.APPROVED.value:
        return artwork

    if principal is not None:
        if principal.is_admin:
            return artwork
        is_party = principal.user_id in (str(artwork.artist_id), str(artwork.current_owner_id))
        if is_party:
            return artwork

    raise ObjectNotFoundError(f"Artwork with id `{artwork_id}` does not exist.")


def _dimension_fields(dimensions: DimensionsSchema | None) -> dict:
    if dimensions is None:
        return {}
    return {"width": dimensions.width, "height": dimensions.height, "unit": dimensions.unit}


def _edition_fields(edition: EditionSchema | None) -> dict:
    if edition is None:
        return {}
    return {"edition_number": edition.number, "edition_total": edition.total}


# ---------------------------------------------------------------------------
# Artwork Router
# ---------------------------------------------------------------------------
artwork_router = APIRouter(prefix="/artworks", tags=["artworks"])


@artwork_router.post("", status_code=201, response_model=ArtworkIdResponse)
async def submit_artwork(
    body: SubmitArtworkRequest,
    principal: Principal = Depends(require_role("artist")),
) -> ArtworkIdResponse:
    """List a new artwork. It is public once the listing fee is paid and an admin approves it."""
    command = SubmitArtwork(
        artist_id=principal.user_id,
        artist_name=principal.username,
        title=body.title,
        description=body.description,
        price=body.price,
        images=json.dumps(body.images),
        tags=json.dumps(body.tags),
        medium=body.medium,
        year=body.year,
        is_original=body.is_original,
        **_dimension_fields(body.dimensions),
        **_edition_fields(body.edition),
    )
    result = current_domain.process(command, asynchronous=False)
    return ArtworkIdResponse(artwork_id=result)


@artwork_router.get("", response_model=ArtworkListResponse)
async def browse_artworks(
    min_price: float | None = Query(default=None, ge=0),
    max_price: float | None = Query(default=None, ge=0),
    artist_id: str | None = None,
    medium: str | None = None,
    tags: list[str] | None = Query(default=None),
    search: str | None = None,
    status: ArtworkStatus = ArtworkStatus.APPROVED,
    include_sold: bool = True,
    sort: str = "-created_at",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    principal: Principal | None = Depends(get_optional_principal),
) -> ArtworkListResponse:
    """Public catalogue of approved artworks.

    Repeat ``tags`` to match artworks carrying any of them. Only admins may
    browse other statuses.
    """
    if principal is None or not principal.is_admin:
        status = ArtworkStatus.APPROVED

    result = browse(
        status=status.value,
        min_price=min_price,
        max_price=max_price,
        artist_id=artist_id,
        medium=medium,
        tags=tags,
        search=search,
        include_sold=include_sold,
        sort=sort,
        page=page,
        limit=limit,
    )
    return _listing(result)


@artwork_router.get("/search", response_model=ArtworkListResponse)
async def search_artworks(
    q: str = Query(min_length=1),
    tags: list[str] | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> ArtworkListResponse:
    return _listing(browse(search=q, tags=tags, page=page, limit=limit))


@artwork_router.get("/mine", response_model=ArtworkListResponse)
async def my_artworks(
    owned: bool = False,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
) -> ArtworkListResponse:
    """Artworks the caller created, or with ``owned=true`` the ones they currently own."""
    if owned:
        result = browse(status=None, owner_id=principal.user_id, page=page, limit=limit)
    else:
        result = browse(status=None, artist_id=principal.user_id, page=page, limit=limit)
    return _listing(result)


@artwork_router.get("/stats", response_model=ArtworkStatsResponse)
async def my_artwork_stats(
    principal: Principal = Depends(require_role("artist")),
) -> ArtworkStatsResponse:
    return ArtworkStatsResponse(**artwork_stats(artist_id=principal.user_id))


@artwork_router.get("/artist/{artist_id}", response_model=ArtworkListResponse)
async def artworks_by_artist(
    artist_id: str,
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    principal: Principal | None = Depends(get_optional_principal),
) -> ArtworkListResponse:
    """An artist's portfolio. The artist and admins may filter on any status."""
    privileged = principal is not None and (principal.is_admin or principal.user_id == artist_id)
    if not privileged:
        status = ArtworkStatus.APPROVED.value

    return _listing(browse(status=status, artist_id=artist_id, page=page, limit=limit))


@artwork_router.get("/{artwork_id}", response_model=ArtworkDetail)
async def get_artwork(
    artwork_id: str,
    principal: Principal | None = Depends(get_optional_principal),
) -> ArtworkDetail:
    return _detail(_visible_artwork(artwork_id, principal))


@artwork_router.get("/{artwork_id}/provenance", response_model=ProvenanceResponse)
async def get_provenance(
    artwork_id: str,
    principal: Principal | None = Depends(get_optional_principal),
) -> ProvenanceResponse:
    """The ownership chain, with a check that no record has been altered."""
    artwork = _visible_artwork(artwork_id, principal)
    return ProvenanceResponse(
        artwork_id=str(artwork.id),
        verified=artwork.verify_provenance(),
        records=[
            TraceabilityRecordResponse(
                sequence=record.sequence,
                from_user_id=str(record.from_user_id) if record.from_user_id else None,
                to_user_id=str(record.to_user_id),
                transaction_type=record.transaction_type,
                transaction_id=str(record.transaction_id) if record.transaction_id else None,
                previous_hash=record.previous_hash,
                record_hash=record.record_hash,
                recorded_at=record.recorded_at,
            )
            for record in artwork.provenance()
        ],
    )


@artwork_router.put("/{artwork_id}", response_model=StatusResponse)
async def update_artwork(
    artwork_id: str,
    body: UpdateArtworkRequest,
    principal: Principal = Depends(get_current_principal),
) -> StatusResponse:
    command = UpdateArtwork(
        artwork_id=artwork_id,
        actor_id=principal.user_id,
        title=body.title,
        description=body.description,
        price=body.price,
        images=json.dumps(body.images) if body.images is not None else None,
        tags=json.dumps(body.tags) if body.tags is not None else None,
        medium=body.medium,
        year=body.year,
        is_original=body.is_original,
        **_dimension_fields(body.dimensions),
        **_edition_fields(body.edition),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@artwork_router.delete("/{artwork_id}", response_model=StatusResponse)
async def withdraw_artwork(
    artwork_id: str,
    principal: Principal = Depends(get_current_principal),
) -> StatusResponse:
    current_domain.process(
        WithdrawArtwork(artwork_id=artwork_id, actor_id=principal.user_id),
        asynchronous=False,
    )
    return StatusResponse(status="withdrawn")


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_artwork_router = APIRouter(prefix="/admin/artworks", tags=["admin"])


@admin_artwork_router.get("", response_model=ArtworkListResponse)
async def list_all_artworks(
    status: str | None = None,
    artist_id: str | None = None,
    search: str | None = None,
    sort: str = "-created_at",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    _admin: Principal = Depends(require_admin),
) -> ArtworkListResponse:
    result = browse(
        status=status,
        artist_id=artist_id,
        search=search,
        sort=sort,
        page=page,
        limit=limit,
    )
    return _listing(result)


@admin_artwork_router.get("/pending", response_model=ArtworkListResponse)
async def list_pending_artworks(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    _admin: Principal = Depends(require_admin),
) -> ArtworkListResponse:
    """Moderation queue, oldest first."""
    result = browse(status=ArtworkStatus.PENDING.value, sort="created_at", page=page, limit=limit)
    return _listing(result)


@admin_artwork_router.get("/stats", response_model=ArtworkStatsResponse)
async def platform_artwork_stats(_admin: Principal = Depends(require_admin)) -> ArtworkStatsResponse:
    return ArtworkStatsResponse(**artwork_stats())


@admin_artwork_router.put("/{artwork_id}/approve", response_model=StatusResponse)
async def approve_artwork(
    artwork_id: str,
    admin: Principal = Depends(require_admin),
) -> StatusResponse:
    current_domain.process(ApproveArtwork(artwork_id=artwork_id, admin_id=admin.user_id), asynchronous=False)
    return StatusResponse(status="approved")


@admin_artwork_router.put("/{artwork_id}/reject", response_model=StatusResponse)
async def reject_artwork(
    artwork_id: str,
    body: RejectArtworkRequest,
    admin: Principal = Depends(require_admin),
) -> StatusResponse:
    command = RejectArtwork(artwork_id=artwork_id, admin_id=admin.user_id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="rejected")


# ---------------------------------------------------------------------------
# Analytics Router
# ---------------------------------------------------------------------------
analytics_router = APIRouter(prefix="/analytics", tags=["analytics"])


@analytics_router.get("/top-artists", response_model=list[ArtistRanking])
async def get_top_artists(
    period: str = DEFAULT_PERIOD,
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
) -> list[ArtistRanking]:
    return [ArtistRanking(**row) for row in top_selling_artists(period, limit)]


@analytics_router.get("/top-artworks", response_model=list[ArtworkRanking])
async def get_top_artworks(
    period: str = DEFAULT_PERIOD,
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
) -> list[ArtworkRanking]:
    return [ArtworkRanking(**row) for row in top_selling_artworks(period, limit)]


@analytics_router.get("/top-categories", response_model=list[CategoryRanking])
async def get_top_categories(
    period: str = DEFAULT_PERIOD,
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
) -> list[CategoryRanking]:
    return [CategoryRanking(**row) for row in top_selling_categories(period, limit)]


@analytics_router.get("/report", response_model=SalesReportResponse)
async def get_sales_report(
    period: str = DEFAULT_PERIOD,
    _admin: Principal = Depends(require_admin),
) -> SalesReportResponse:
    return SalesReportResponse(**sales_report(period))
