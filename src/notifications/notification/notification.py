"""Notification aggregate: one transactional email and its delivery history.

Notifications are created in reaction to other contexts' events, rendered
from a template and handed to the email channel. Status moves as follows::

    Pending ──send──▶ Sent ──report──▶ Delivered | Bounced
       │  ▲
       │  └──retry── Failed   (at most ``max_retries`` failed attempts)
       └──cancel──▶ Cancelled

A failed notification becomes due for retry after an exponential backoff:
2s after the first failure, 4s after the second.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from notifications.domain import notifications
from notifications.notification.events import (
    DeliveryReported,
    NotificationCancelled,
    NotificationCreated,
    NotificationFailed,
    NotificationRetried,
    NotificationSent,
)
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

MAX_RETRIES = 3
BACKOFF_BASE = timedelta(seconds=2)


class NotificationType(Enum):
    EMAIL_VERIFICATION = "EmailVerification"
    PASSWORD_RESET = "PasswordReset"
    WELCOME = "Welcome"
    LISTING_FEE_CONFIRMATION = "ListingFeeConfirmation"
    PURCHASE_CONFIRMATION = "PurchaseConfirmation"
    SALE_NOTIFICATION = "SaleNotification"
    PAYMENT_FAILED = "PaymentFailed"
    PURCHASE_REFUNDED = "PurchaseRefunded"
    ARTWORK_APPROVED = "ArtworkApproved"
    ARTWORK_REJECTED = "ArtworkRejected"


class NotificationChannel(Enum):
    EMAIL = "Email"


class NotificationStatus(Enum):
    PENDING = "Pending"
    SENT = "Sent"
    DELIVERED = "Delivered"
    FAILED = "Failed"
    BOUNCED = "Bounced"
    CANCELLED = "Cancelled"


_NEXT = {
    NotificationStatus.PENDING: (NotificationStatus.SENT, NotificationStatus.FAILED, NotificationStatus.CANCELLED),
    NotificationStatus.SENT: (NotificationStatus.DELIVERED, NotificationStatus.BOUNCED),
    NotificationStatus.FAILED: (NotificationStatus.PENDING,),
}


def _now() -> datetime:
    return datetime.now(UTC)


@notifications.aggregate
class Notification:
    """``source_event_id`` names the business event behind the email. With the
    type and recipient it identifies the notification, so a redelivered event
    never produces a second email."""

    recipient_id: Identifier(required=True)
    recipient_email: String(required=True, max_length=254)
    notification_type: String(choices=NotificationType, required=True)
    channel: String(choices=NotificationChannel, default=NotificationChannel.EMAIL.value)

    subject: String(max_length=500)
    body: Text(required=True)
    template_name: String(max_length=200)
    context_data: Text()  # JSON

    source_event_type: String(max_length=200)
    source_event_id: String(max_length=200)

    status: String(choices=NotificationStatus, default=NotificationStatus.PENDING.value)
    provider_message_id: String(max_length=255)
    failure_reason: String(max_length=500)
    retry_count: Integer(default=0, min_value=0)
    max_retries: Integer(default=MAX_RETRIES, min_value=1)

    created_at: DateTime()
    sent_at: DateTime()
    delivered_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, recipient_id, recipient_email, notification_type, body, **details):
        """A new PENDING email. ``details`` holds the optional fields: subject,
        template_name, context_data, source_event_type, source_event_id."""
        now = _now()
        notification = cls(
            recipient_id=recipient_id,
            recipient_email=recipient_email,
            notification_type=notification_type,
            body=body,
            created_at=now,
            updated_at=now,
            **details,
        )
        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                recipient_id=str(recipient_id),
                recipient_email=recipient_email,
                notification_type=notification_type,
                channel=notification.channel,
                subject=notification.subject,
                template_name=notification.template_name,
                source_event_type=notification.source_event_type,
                source_event_id=notification.source_event_id,
                created_at=now,
            )
        )
        return notification

    @property
    def attempt(self) -> int:
        """The attempt in flight: failures so far plus the current one."""
        return (self.retry_count or 0) + 1

    def _move_to(self, target: NotificationStatus) -> datetime:
        current = NotificationStatus(self.status)
        if target not in _NEXT.get(current, ()):
            raise ValidationError({"status": [f"Cannot move a {current.value} notification to {target.value}"]})
        now = _now()
        self.status = target.value
        self.updated_at = now
        return now

    def mark_sent(self, provider_message_id=None):
        now = self._move_to(NotificationStatus.SENT)
        self.provider_message_id = provider_message_id
        self.failure_reason = None
        self.sent_at = now
        self.raise_(
            NotificationSent(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                provider_message_id=provider_message_id,
                attempt=self.attempt,
                sent_at=now,
            )
        )

    def mark_failed(self, reason):
        attempt = self.attempt
        now = self._move_to(NotificationStatus.FAILED)
        self.failure_reason = reason
        self.retry_count = attempt
        self.raise_(
            NotificationFailed(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                reason=reason,
                attempt=attempt,
                attempts_left=max(self.max_retries - attempt, 0),
                retry_at=self.next_attempt_at(),
                failed_at=now,
            )
        )

    def report_delivery(self, delivered: bool, reason=None):
        """Record the provider's final word on a sent email."""
        outcome = NotificationStatus.DELIVERED if delivered else NotificationStatus.BOUNCED
        now = self._move_to(outcome)
        if delivered:
            self.delivered_at = now
        else:
            self.failure_reason = reason or "Bounced"
        self.raise_(
            DeliveryReported(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                outcome=outcome.value,
                reason=None if delivered else self.failure_reason,
                reported_at=now,
            )
        )

    def cancel(self, reason):
        now = self._move_to(NotificationStatus.CANCELLED)
        self.failure_reason = reason
        self.raise_(
            NotificationCancelled(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                reason=reason,
                cancelled_at=now,
            )
        )

    def can_retry(self) -> bool:
        return self.status == NotificationStatus.FAILED.value and self.retry_count < self.max_retries

    def next_attempt_at(self) -> datetime | None:
        if not self.can_retry():
            return None
        failed_at = self.updated_at
        if failed_at.tzinfo is None:
            failed_at = failed_at.replace(tzinfo=UTC)
        return failed_at + BACKOFF_BASE * 2 ** (self.retry_count - 1)

    def retry(self):
        """Queue a failed notification for another attempt."""
        if self.status == NotificationStatus.FAILED.value and not self.can_retry():
            raise ValidationError({"retry_count": [f"Gave up after {self.retry_count} attempts"]})
        now = self._move_to(NotificationStatus.PENDING)
        self.failure_reason = None
        self.raise_(
            NotificationRetried(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                attempt=self.attempt,
                retried_at=now,
            )
        )
