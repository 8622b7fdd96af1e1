"""Pydantic request/response models for the Notifications API.

API schemas are separate from Protean commands (anti-corruption pattern).
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------
class CancelNotificationRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class RetryFailedRequest(BaseModel):
    as_of: datetime | None = None


class DeliveryReportRequest(BaseModel):
    provider_message_id: str = Field(..., min_length=1, max_length=255)
    outcome: Literal["Delivered", "Bounced"]
    reason: str | None = Field(default=None, max_length=500)


class ConfigureChannelRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = Field(default="Email delivery failed", max_length=500)


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class NotificationResponse(BaseModel):
    notification_id: str
    recipient_id: str
    recipient_email: str | None = None
    notification_type: str
    channel: str
    subject: str | None = None
    status: str
    source_event_type: str | None = None
    failure_reason: str | None = None
    retry_count: int = 0
    next_attempt_at: datetime | None = None
    created_at: datetime | None = None
    sent_at: datetime | None = None
    updated_at: datetime | None = None


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    pagination: PaginationMeta


class DeliveryReportResponse(BaseModel):
    notification_id: str
    status: str


class RetryFailedResponse(BaseModel):
    retried: int


class ChannelConfigResponse(BaseModel):
    channel: str
    should_succeed: bool
    failure_reason: str
