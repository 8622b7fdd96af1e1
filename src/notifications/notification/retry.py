"""Retry commands: resend failed notifications.

RetryNotification retries one notification on request. RetryFailedNotifications
is the periodic sweep: every failed notification whose backoff delay has
passed, and which has attempts left, goes back to PENDING and is dispatched
again.
"""

from datetime import UTC, datetime

import structlog
from notifications.domain import notifications
from notifications.notification.notification import Notification, NotificationStatus
from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.paging import iterate

logger = structlog.get_logger(__name__)


@notifications.command(part_of="Notification")
class RetryNotification:
    """Request to retry a failed notification."""

    notification_id: Identifier(required=True)


@notifications.command(part_of="Notification")
class RetryFailedNotifications:
    """Sweep failed notifications that are due for another attempt."""

    as_of: DateTime()


@notifications.command_handler(part_of=Notification)
class RetryNotificationHandler:
    @handle(RetryNotification)
    def retry_notification(self, command: RetryNotification):
        repo = current_domain.repository_for(Notification)
        notification = repo.get(command.notification_id)
        notification.retry()
        repo.add(notification)

    @handle(RetryFailedNotifications)
    def retry_failed_notifications(self, command: RetryFailedNotifications) -> int:
        as_of = command.as_of or datetime.now(UTC)
        if as_of.tzinfo is None:
            as_of = as_of.replace(tzinfo=UTC)

        repo = current_domain.repository_for(Notification)
        failed = list(iterate(repo._dao.query.filter(status=NotificationStatus.FAILED.value)))

        retried = 0
        for notification in failed:
            due_at = notification.next_attempt_at()
            if due_at is None or due_at > as_of:
                continue
            notification.retry()
            repo.add(notification)
            retried += 1

        logger.info("Failed notifications swept", candidates=len(failed), retried=retried)
        return retried
