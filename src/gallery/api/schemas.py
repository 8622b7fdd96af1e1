"""Pydantic request/response schemas for the Gallery API."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class DimensionsSchema(BaseModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    unit: Literal["cm", "in"] = "cm"


class EditionSchema(BaseModel):
    number: int = Field(ge=1)
    total: int = Field(ge=1)


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class SubmitArtworkRequest(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=2000)
    price: float = Field(ge=0)
    images: list[str] = Field(min_length=1)
    tags: list[str] = []
    medium: str | None = Field(default=None, max_length=100)
    dimensions: DimensionsSchema | None = None
    year: int | None = Field(default=None, ge=0)
    is_original: bool = True
    edition: EditionSchema | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Harbour at Dusk",
                    "description": "Oil on linen, painted on location in Piraeus.",
                    "price": 450.0,
                    "images": ["https://images.example.com/harbour.jpg"],
                    "tags": ["seascape", "oil"],
                    "medium": "Oil",
                    "dimensions": {"width": 60, "height": 40, "unit": "cm"},
                    "year": 2024,
                }
            ]
        }
    }


class UpdateArtworkRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=2000)
    price: float | None = Field(default=None, ge=0)
    images: list[str] | None = Field(default=None, min_length=1)
    tags: list[str] | None = None
    medium: str | None = Field(default=None, max_length=100)
    dimensions: DimensionsSchema | None = None
    year: int | None = Field(default=None, ge=0)
    is_original: bool | None = None
    edition: EditionSchema | None = None


class RejectArtworkRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class ArtworkIdResponse(BaseModel):
    artwork_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class ArtworkSummary(BaseModel):
    artwork_id: str
    title: str
    price: float
    currency: str
    medium: str | None = None
    tags: list[str] = []
    images: list[str] = []
    artist_id: str
    artist_name: str | None = None
    current_owner_id: str
    status: str
    listing_fee_status: str
    is_sold: bool
    created_at: datetime | None = None


class ArtworkListResponse(BaseModel):
    artworks: list[ArtworkSummary]
    pagination: PaginationMeta


class TraceabilityRecordResponse(BaseModel):
    sequence: int
    from_user_id: str | None = None
    to_user_id: str
    transaction_type: str
    transaction_id: str | None = None
    previous_hash: str
    record_hash: str
    recorded_at: datetime


class ArtworkDetail(ArtworkSummary):
    description: str
    dimensions: DimensionsSchema | None = None
    year: int | None = None
    is_original: bool
    edition: EditionSchema | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None
    listing_fee_paid_at: datetime | None = None
    sold_at: datetime | None = None
    updated_at: datetime | None = None


class ProvenanceResponse(BaseModel):
    artwork_id: str
    verified: bool
    records: list[TraceabilityRecordResponse]


class ArtworkStatsResponse(BaseModel):
    total: int
    approved: int
    pending: int
    rejected: int
    sold: int
    average_price: float
    total_value: float


class ArtistRanking(BaseModel):
    artist_id: str
    artist_name: str | None = None
    sales_count: int
    total_revenue: float
    average_price: float


class ArtworkRanking(BaseModel):
    artwork_id: str
    title: str
    artist_id: str
    medium: str | None = None
    sales_count: int
    total_revenue: float
    average_price: float


class CategoryRanking(BaseModel):
    category: str
    sales_count: int
    total_revenue: float
    average_price: float
    artist_count: int


class SalesSummary(BaseModel):
    total_sales: int
    total_revenue: float


class SalesReportResponse(BaseModel):
    period: str
    generated_at: datetime
    summary: SalesSummary
    top_artists: list[ArtistRanking]
    top_artworks: list[ArtworkRanking]
    top_categories: list[CategoryRanking]
