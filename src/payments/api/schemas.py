"""Pydantic request/response schemas for the Payments API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    artwork_id: str

    model_config = {"json_schema_extra": {"examples": [{"artwork_id": "5f0c6a1e-2b3d-4c5e-8f9a-0b1c2d3e4f5a"}]}}


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Card declined"


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CheckoutResponse(BaseModel):
    transaction_id: str
    session_id: str
    url: str


class WebhookResponse(BaseModel):
    received: bool = True
    outcome: str


class TransactionResponse(BaseModel):
    transaction_id: str
    transaction_type: str
    artwork_id: str
    artwork_title: str | None = None
    buyer_id: str | None = None
    seller_id: str
    amount: float
    commission: float
    currency: str
    status: str
    payment_reference: str | None = None
    failure_reason: str | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class TransactionListResponse(BaseModel):
    transactions: list[TransactionResponse]
    pagination: PaginationMeta


class PaymentStatsResponse(BaseModel):
    total_transactions: int
    total_spent: float
    total_earned: float
    sales_count: int
    purchases_count: int
    listing_fees_count: int


class TransactionSummaryResponse(BaseModel):
    total: int
    pending: int
    completed: int
    failed: int
    refunded: int
    sales_volume: float
    platform_revenue: float


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str
