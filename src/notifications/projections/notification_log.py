"""NotificationLog: the email audit trail users and admins browse.

One row per notification, without the rendered body. Rows are created on
NotificationCreated; later events only patch the row, and an event for a
row that does not exist yet is dropped.
"""

from notifications.domain import notifications
from notifications.notification.events import (
    DeliveryReported,
    NotificationCancelled,
    NotificationCreated,
    NotificationFailed,
    NotificationRetried,
    NotificationSent,
)
from notifications.notification.notification import Notification, NotificationStatus
from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain
from shared.paging import Page, paginate


@notifications.projection
class NotificationLog:
    notification_id: Identifier(identifier=True, required=True)
    recipient_id: Identifier(required=True)
    recipient_email: String(max_length=254)
    notification_type: String(required=True)
    channel: String(required=True)
    subject: String(max_length=500)
    status: String(required=True)
    template_name: String(max_length=200)
    source_event_type: String(max_length=200)
    source_event_id: String(max_length=200)
    provider_message_id: String(max_length=255)
    failure_reason: String(max_length=500)
    retry_count: Integer(default=0)
    next_attempt_at: DateTime()
    created_at: DateTime()
    sent_at: DateTime()
    delivered_at: DateTime()
    updated_at: DateTime()


def _patch(notification_id, **changes) -> None:
    repo = current_domain.repository_for(NotificationLog)
    try:
        row = repo.get(notification_id)
    except ObjectNotFoundError:
        return
    for field, value in changes.items():
        setattr(row, field, value)
    repo.add(row)


@notifications.projector(projector_for=NotificationLog, aggregates=[Notification])
class NotificationLogProjector:
    @on(NotificationCreated)
    def on_created(self, event: NotificationCreated) -> None:
        current_domain.repository_for(NotificationLog).add(
            NotificationLog(
                notification_id=event.notification_id,
                recipient_id=event.recipient_id,
                recipient_email=event.recipient_email,
                notification_type=event.notification_type,
                channel=event.channel,
                subject=event.subject,
                status=NotificationStatus.PENDING.value,
                template_name=event.template_name,
                source_event_type=event.source_event_type,
                source_event_id=event.source_event_id,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    @on(NotificationSent)
    def on_sent(self, event: NotificationSent) -> None:
        _patch(
            event.notification_id,
            status=NotificationStatus.SENT.value,
            provider_message_id=event.provider_message_id,
            failure_reason=None,
            next_attempt_at=None,
            sent_at=event.sent_at,
            updated_at=event.sent_at,
        )

    @on(NotificationFailed)
    def on_failed(self, event: NotificationFailed) -> None:
        _patch(
            event.notification_id,
            status=NotificationStatus.FAILED.value,
            failure_reason=event.reason,
            retry_count=event.attempt,
            next_attempt_at=event.retry_at,
            updated_at=event.failed_at,
        )

    @on(NotificationRetried)
    def on_retried(self, event: NotificationRetried) -> None:
        _patch(
            event.notification_id,
            status=NotificationStatus.PENDING.value,
            failure_reason=None,
            next_attempt_at=None,
            updated_at=event.retried_at,
        )

    @on(NotificationCancelled)
    def on_cancelled(self, event: NotificationCancelled) -> None:
        _patch(
            event.notification_id,
            status=NotificationStatus.CANCELLED.value,
            failure_reason=event.reason,
            updated_at=event.cancelled_at,
        )

    @on(DeliveryReported)
    def on_delivery_reported(self, event: DeliveryReported) -> None:
        changes = {"status": event.outcome, "updated_at": event.reported_at}
        if event.outcome == NotificationStatus.DELIVERED.value:
            changes["delivered_at"] = event.reported_at
        else:
            changes["failure_reason"] = event.reason
        _patch(event.notification_id, **changes)


def recipient_history(recipient_id, status=None, page=1, limit=20) -> Page:
    """A recipient's notifications, newest first."""
    filters = {"recipient_id": str(recipient_id)}
    if status:
        filters["status"] = status
    query = current_domain.repository_for(NotificationLog)._dao.query.filter(**filters).order_by("-created_at")
    return paginate(query, page=page, limit=limit)
