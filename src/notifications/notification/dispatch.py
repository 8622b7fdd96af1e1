"""Internal dispatch handler: sends notifications through the email channel.

Reacts to NotificationCreated and NotificationRetried events and hands the
email to the configured channel adapter. The notification moves to SENT or
FAILED depending on the result.
"""

import structlog
from notifications.channel import get_channel
from notifications.channel.email_port import SendResult
from notifications.domain import notifications
from notifications.notification.events import NotificationCreated, NotificationRetried
from notifications.notification.notification import Notification, NotificationStatus
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)


def dispatch(notification_id) -> None:
    """Send a PENDING notification and record the outcome."""
    repo = current_domain.repository_for(Notification)
    notification = repo.get(notification_id)

    if NotificationStatus(notification.status) != NotificationStatus.PENDING:
        logger.info(
            "Notification not in PENDING status, skipping dispatch",
            notification_id=str(notification_id),
            status=notification.status,
        )
        return

    try:
        result = get_channel(notification.channel).send(
            to=notification.recipient_email,
            subject=notification.subject or "",
            body=notification.body,
        )
    except Exception as exc:
        # Misconfiguration and transport errors count as a failed attempt
        logger.exception("Notification dispatch raised", notification_id=str(notification.id))
        result = SendResult.failed(str(exc))

    if result.ok:
        notification.mark_sent(provider_message_id=result.message_id)
        logger.info("Notification sent", notification_id=str(notification.id), to=notification.recipient_email)
    else:
        notification.mark_failed(result.error or "Unknown dispatch error")
        logger.warning(
            "Notification dispatch failed",
            notification_id=str(notification.id),
            retry_count=notification.retry_count,
            error=notification.failure_reason,
        )

    repo.add(notification)


@notifications.event_handler(part_of=Notification)
class NotificationDispatcher:
    """Dispatches notifications via the channel adapter when they are queued."""

    @handle(NotificationCreated)
    def on_notification_created(self, event: NotificationCreated) -> None:
        dispatch(event.notification_id)

    @handle(NotificationRetried)
    def on_notification_retried(self, event: NotificationRetried) -> None:
        dispatch(event.notification_id)
