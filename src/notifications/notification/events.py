"""Domain events for the Notification aggregate.

``attempt`` counts send attempts from 1, so the first failure is attempt 1
and a notification that went out after two failures was sent on attempt 3.
"""

from notifications.domain import notifications
from protean.fields import DateTime, Identifier, Integer, String


@notifications.event(part_of="Notification")
class NotificationCreated:
    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    recipient_email: String(required=True)
    notification_type: String(required=True)
    channel: String(required=True)
    subject: String()
    template_name: String()
    source_event_type: String()
    source_event_id: String()
    created_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationSent:
    """The email provider accepted the message."""

    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    provider_message_id: String()
    attempt: Integer(required=True)
    sent_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationFailed:
    """A send attempt failed. ``retry_at`` is empty once attempts run out."""

    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    reason: String(required=True)
    attempt: Integer(required=True)
    attempts_left: Integer(required=True)
    retry_at: DateTime()
    failed_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationRetried:
    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    attempt: Integer(required=True)
    retried_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationCancelled:
    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    reason: String(required=True)
    cancelled_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class DeliveryReported:
    """The provider reported the final fate of a sent email: Delivered or Bounced."""

    __version__ = 1

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    outcome: String(required=True)
    reason: String()
    reported_at: DateTime(required=True)
