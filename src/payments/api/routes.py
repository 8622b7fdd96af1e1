"""FastAPI routes for the Payments domain."""

import json
import os

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from protean.utils.globals import current_domain

from payments.api.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    ConfigureGatewayRequest,
    GatewayConfigResponse,
    PaginationMeta,
    PaymentStatsResponse,
    TransactionListResponse,
    TransactionResponse,
    TransactionSummaryResponse,
    WebhookResponse,
)
from payments.domain import logger
from payments.gateway import get_gateway
from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import GatewayError, WebhookSignatureError
from payments.projections.transaction_record import (
    TransactionRecord,
    list_transactions,
    payment_stats,
    transaction_summary,
)
from payments.transaction.listing_fee import StartListingFeeCheckout
from payments.transaction.purchase import StartPurchaseCheckout
from payments.transaction.webhook import ProcessGatewayWebhook
from shared.auth import Principal, get_current_principal, require_admin, require_role
from shared.errors import PermissionDenied
from shared.paging import Page


def _transaction(record: TransactionRecord) -> TransactionResponse:
    return TransactionResponse(
        transaction_id=str(record.transaction_id),
        transaction_type=record.transaction_type,
        artwork_id=str(record.artwork_id),
        artwork_title=record.artwork_title,
        buyer_id=str(record.buyer_id) if record.buyer_id else None,
        seller_id=str(record.seller_id),
        amount=record.amount_cents / 100,
        commission=(record.commission_cents or 0) / 100,
        currency=record.currency,
        status=record.status,
        payment_reference=record.payment_reference,
        failure_reason=record.failure_reason,
        created_at=record.created_at,
        completed_at=record.completed_at,
    )


def _listing(result: Page) -> TransactionListResponse:
    return TransactionListResponse(
        transactions=[_transaction(record) for record in result.items],
        pagination=PaginationMeta(**result.meta()),
    )


def _checkout(command) -> CheckoutResponse:
    try:
        result = current_domain.process(command, asynchronous=False)
    except GatewayError as exc:
        raise HTTPException(status_code=502, detail=f"Payment gateway error: {exc}") from exc
    return CheckoutResponse(**result)


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/listing-fee/checkout", status_code=201, response_model=CheckoutResponse)
async def start_listing_fee_checkout(
    body: CheckoutRequest,
    principal: Principal = Depends(require_role("artist")),
) -> CheckoutResponse:
    """Open a checkout for the flat listing fee of one of the caller's artworks."""
    return _checkout(
        StartListingFeeCheckout(
            user_id=principal.user_id,
            email=principal.email,
            artwork_id=body.artwork_id,
        )
    )


@payment_router.post("/purchase/checkout", status_code=201, response_model=CheckoutResponse)
async def start_purchase_checkout(
    body: CheckoutRequest,
    principal: Principal = Depends(get_current_principal),
) -> CheckoutResponse:
    return _checkout(
        StartPurchaseCheckout(
            user_id=principal.user_id,
            email=principal.email,
            artwork_id=body.artwork_id,
        )
    )


@payment_router.post("/webhook", response_model=WebhookResponse)
async def receive_webhook(
    request: Request,
    stripe_signature: str = Header(default=""),
) -> WebhookResponse:
    """Gateway callback. The raw body is needed to verify the signature."""
    payload = await request.body()
    try:
        event = get_gateway().construct_webhook_event(payload, stripe_signature)
    except WebhookSignatureError as exc:
        logger.warning("Webhook signature verification failed", error=str(exc))
        raise HTTPException(status_code=400, detail=f"Webhook Error: {exc}") from exc

    command = ProcessGatewayWebhook(
        event_id=event.event_id,
        event_type=event.event_type,
        session_id=event.session_id,
        payment_reference=event.payment_reference,
        metadata=json.dumps(event.metadata),
        failure_reason=event.failure_reason,
    )
    outcome = current_domain.process(command, asynchronous=False)
    return WebhookResponse(outcome=outcome)


@payment_router.get("/history", response_model=TransactionListResponse)
async def get_payment_history(
    type: str = "all",
    status: str = "all",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
) -> TransactionListResponse:
    result = list_transactions(
        user_id=principal.user_id,
        transaction_type=type,
        status=status,
        page=page,
        limit=limit,
    )
    return _listing(result)


@payment_router.get("/stats", response_model=PaymentStatsResponse)
async def get_payment_stats(principal: Principal = Depends(get_current_principal)) -> PaymentStatsResponse:
    return PaymentStatsResponse(**payment_stats(principal.user_id))


@payment_router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: str,
    principal: Principal = Depends(get_current_principal),
) -> TransactionResponse:
    record = current_domain.repository_for(TransactionRecord).get(transaction_id)
    involved = principal.user_id in (str(record.buyer_id), str(record.seller_id))
    if not (involved or principal.is_admin):
        raise PermissionDenied("You do not have permission to view this transaction")
    return _transaction(record)


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only).

    This endpoint is only available when PROTEAN_ENV is not 'production'.
    It allows making checkouts fail for manual API testing.
    """
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
    )


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_transaction_router = APIRouter(prefix="/admin/transactions", tags=["admin"])


@admin_transaction_router.get("", response_model=TransactionListResponse)
async def list_all_transactions(
    type: str = "all",
    status: str = "all",
    user_id: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    _admin: Principal = Depends(require_admin),
) -> TransactionListResponse:
    result = list_transactions(
        user_id=user_id,
        transaction_type=type,
        status=status,
        page=page,
        limit=limit,
    )
    return _listing(result)


@admin_transaction_router.get("/summary", response_model=TransactionSummaryResponse)
async def get_transaction_summary(_admin: Principal = Depends(require_admin)) -> TransactionSummaryResponse:
    return TransactionSummaryResponse(**transaction_summary())
