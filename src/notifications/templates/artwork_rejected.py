"""Artwork rejected template: includes the moderator's reason."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)
from notifications.templates.signature import SIGNATURE


class ArtworkRejectedTemplate:
    notification_type = NotificationType.ARTWORK_REJECTED.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        username = context.get("username", "there")
        title = context.get("artwork_title", "your artwork")
        reason = context.get("reason", "No reason given")
        return {
            "subject": f"Not approved: {title}",
            "body": (
                f"Hello {username},\n\n"
                f"Unfortunately \"{title}\" was not approved for listing.\n\n"
                f"Reason: {reason}\n\n"
                "Reply to this email if you have questions about the decision.\n\n"
                f"{SIGNATURE}"
            ),
        }
