"""Administrative changes to a notification: cancelling it, and recording the
provider's delivery report for an email already sent."""

from enum import Enum

import structlog
from notifications.domain import notifications
from notifications.notification.notification import Notification, NotificationStatus
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)


class DeliveryOutcome(Enum):
    DELIVERED = NotificationStatus.DELIVERED.value
    BOUNCED = NotificationStatus.BOUNCED.value


_OUTCOMES = {outcome.value for outcome in DeliveryOutcome}


@notifications.command(part_of="Notification")
class CancelNotification:
    notification_id: Identifier(required=True)
    reason: String(required=True, max_length=500)


@notifications.command(part_of="Notification")
class ReportDelivery:
    """Delivery report keyed by the provider's message id, as in a provider callback."""

    provider_message_id: String(required=True, max_length=255)
    outcome: String(required=True, choices=DeliveryOutcome)
    reason: String(max_length=500)


@notifications.command_handler(part_of=Notification)
class LifecycleHandler:
    @handle(CancelNotification)
    def cancel_notification(self, command: CancelNotification) -> None:
        repo = current_domain.repository_for(Notification)
        notification = repo.get(command.notification_id)
        notification.cancel(command.reason)
        repo.add(notification)

    @handle(ReportDelivery)
    def report_delivery(self, command: ReportDelivery) -> str:
        repo = current_domain.repository_for(Notification)
        matches = repo._dao.query.filter(provider_message_id=command.provider_message_id).all()
        if not matches.total:
            raise ObjectNotFoundError(f"No notification was sent as `{command.provider_message_id}`")

        notification = matches.items[0]
        if notification.status == command.outcome:
            return str(notification.id)  # Provider resent the report
        if notification.status in _OUTCOMES:
            raise ValidationError({"outcome": [f"Delivery already reported as {notification.status}"]})

        notification.report_delivery(
            delivered=command.outcome == NotificationStatus.DELIVERED.value,
            reason=command.reason,
        )
        repo.add(notification)
        logger.info(
            "Delivery reported",
            notification_id=str(notification.id),
            outcome=command.outcome,
        )
        return str(notification.id)
