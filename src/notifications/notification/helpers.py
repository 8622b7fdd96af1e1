"""Shared helpers for notification event handlers.

Provides the common pattern: skip duplicates → render template → create
the Notification.
"""

import json

import structlog
from notifications.notification.notification import Notification
from notifications.projections.recipient import find_recipient
from notifications.templates import get_template
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)


def already_notified(recipient_id: str, notification_type: str, source_event_id: str) -> bool:
    repo = current_domain.repository_for(Notification)
    results = repo._dao.query.filter(
        recipient_id=str(recipient_id),
        notification_type=notification_type,
        source_event_id=source_event_id,
    ).all()
    return results.total > 0


def create_notification(
    recipient_id: str,
    recipient_email: str,
    notification_type: str,
    context: dict,
    source_event_type: str,
    source_event_id: str,
) -> str | None:
    """Render and store one notification unless it already exists.

    Returns:
        The new notification ID, or None for a redelivered source event.
    """
    if already_notified(recipient_id, notification_type, source_event_id):
        logger.info(
            "Notification already created for source event",
            recipient_id=str(recipient_id),
            notification_type=notification_type,
            source_event_id=source_event_id,
        )
        return None

    template_cls = get_template(notification_type)
    rendered = template_cls.render(context)

    notification = Notification.create(
        recipient_id=str(recipient_id),
        recipient_email=recipient_email,
        notification_type=notification_type,
        subject=rendered.get("subject"),
        body=rendered["body"],
        template_name=template_cls.__name__,
        source_event_type=source_event_type,
        source_event_id=source_event_id,
        context_data=json.dumps(context, default=str),
    )
    current_domain.repository_for(Notification).add(notification)

    logger.info(
        "Notification created",
        notification_id=str(notification.id),
        recipient_id=str(recipient_id),
        notification_type=notification_type,
    )
    return str(notification.id)


def notify_user(
    user_id,
    notification_type: str,
    context: dict,
    source_event_type: str,
    source_event_id: str,
) -> str | None:
    """Create a notification for a user known only by id.

    The address and greeting name come from the Recipient view. Unknown
    users are logged and skipped.
    """
    recipient = find_recipient(user_id)
    if recipient is None:
        logger.warning(
            "No email address known for recipient",
            recipient_id=str(user_id),
            notification_type=notification_type,
        )
        return None

    return create_notification(
        recipient_id=str(user_id),
        recipient_email=recipient.email,
        notification_type=notification_type,
        context={"username": recipient.username, **context},
        source_event_type=source_event_type,
        source_event_id=source_event_id,
    )
