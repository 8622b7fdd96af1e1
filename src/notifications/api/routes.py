"""FastAPI routes for the Notifications domain.

Thin adapters that translate HTTP requests into domain commands. Recipients
can read their own notification history; retries and cancellations are
administrative.
"""

import os

from fastapi import APIRouter, Depends, HTTPException, Query
from notifications.api.schemas import (
    CancelNotificationRequest,
    ChannelConfigResponse,
    ConfigureChannelRequest,
    DeliveryReportRequest,
    DeliveryReportResponse,
    NotificationListResponse,
    NotificationResponse,
    PaginationMeta,
    RetryFailedRequest,
    RetryFailedResponse,
    StatusResponse,
)
from notifications.channel import get_channel
from notifications.channel.fake_email import FakeEmailAdapter
from notifications.notification.lifecycle import CancelNotification, ReportDelivery
from notifications.notification.notification import NotificationChannel
from notifications.notification.retry import RetryFailedNotifications, RetryNotification
from notifications.projections.notification_log import NotificationLog, recipient_history
from protean.utils.globals import current_domain
from shared.auth import Principal, get_current_principal, require_admin
from shared.errors import PermissionDenied

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification(log: NotificationLog) -> NotificationResponse:
    return NotificationResponse(
        notification_id=str(log.notification_id),
        recipient_id=str(log.recipient_id),
        recipient_email=log.recipient_email,
        notification_type=log.notification_type,
        channel=log.channel,
        subject=log.subject,
        status=log.status,
        source_event_type=log.source_event_type,
        failure_reason=log.failure_reason,
        retry_count=log.retry_count or 0,
        next_attempt_at=log.next_attempt_at,
        created_at=log.created_at,
        sent_at=log.sent_at,
        updated_at=log.updated_at,
    )


def _ensure_own_or_admin(recipient_id, principal: Principal) -> None:
    if not principal.is_admin and str(recipient_id) != principal.user_id:
        raise PermissionDenied("You can only view your own notifications")


# ---------------------------------------------------------------------------
# Notification history
# ---------------------------------------------------------------------------
@router.get("/recipient/{user_id}", response_model=NotificationListResponse)
async def get_recipient_notifications(
    user_id: str,
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
) -> NotificationListResponse:
    """A user's notification history, newest first."""
    _ensure_own_or_admin(user_id, principal)
    result = recipient_history(user_id, status=status, page=page, limit=limit)
    return NotificationListResponse(
        notifications=[_notification(log) for log in result.items],
        pagination=PaginationMeta(**result.meta()),
    )


@router.get("/{notification_id}", response_model=NotificationResponse)
async def get_notification(
    notification_id: str,
    principal: Principal = Depends(get_current_principal),
) -> NotificationResponse:
    log = current_domain.repository_for(NotificationLog).get(notification_id)
    _ensure_own_or_admin(log.recipient_id, principal)
    return _notification(log)


# ---------------------------------------------------------------------------
# Notification lifecycle
# ---------------------------------------------------------------------------
@router.put("/{notification_id}/retry", response_model=StatusResponse)
async def retry_notification(
    notification_id: str,
    _admin: Principal = Depends(require_admin),
) -> StatusResponse:
    """Retry a failed notification now, ignoring the backoff delay."""
    current_domain.process(RetryNotification(notification_id=notification_id), asynchronous=False)
    return StatusResponse(status="retried")


@router.put("/{notification_id}/cancel", response_model=StatusResponse)
async def cancel_notification(
    notification_id: str,
    body: CancelNotificationRequest,
    _admin: Principal = Depends(require_admin),
) -> StatusResponse:
    command = CancelNotification(notification_id=notification_id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="cancelled")


@router.post("/delivery-report", response_model=DeliveryReportResponse)
async def report_delivery(
    body: DeliveryReportRequest,
    _admin: Principal = Depends(require_admin),
) -> DeliveryReportResponse:
    """Record the provider's delivered/bounced verdict for a sent email."""
    command = ReportDelivery(provider_message_id=body.provider_message_id, outcome=body.outcome, reason=body.reason)
    notification_id = current_domain.process(command, asynchronous=False)
    return DeliveryReportResponse(notification_id=notification_id, status=body.outcome)


# ---------------------------------------------------------------------------
# Maintenance: periodic background job endpoint
# ---------------------------------------------------------------------------
@router.post("/retry-failed", response_model=RetryFailedResponse)
async def retry_failed_notifications(
    body: RetryFailedRequest | None = None,
    _admin: Principal = Depends(require_admin),
) -> RetryFailedResponse:
    """Retry every failed notification whose backoff has elapsed.

    Designed to be called periodically by an external scheduler.
    """
    command = RetryFailedNotifications(as_of=body.as_of if body else None)
    retried = current_domain.process(command, asynchronous=False)
    return RetryFailedResponse(retried=retried or 0)


@router.post("/channel/configure", response_model=ChannelConfigResponse)
async def configure_channel(body: ConfigureChannelRequest) -> ChannelConfigResponse:
    """Configure the fake email adapter (non-production only).

    Lets manual API testing simulate email delivery failures.
    """
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Channel configuration not available in production")

    adapter = get_channel(NotificationChannel.EMAIL.value)
    if not isinstance(adapter, FakeEmailAdapter):
        raise HTTPException(status_code=400, detail="Channel configuration only available for FakeEmailAdapter")

    adapter.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return ChannelConfigResponse(
        channel=type(adapter).__name__,
        should_succeed=adapter.should_succeed,
        failure_reason=adapter.failure_reason,
    )
