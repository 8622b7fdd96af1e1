"""Artwork approved template: the listing is now public."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)
from notifications.templates.signature import SIGNATURE


class ArtworkApprovedTemplate:
    notification_type = NotificationType.ARTWORK_APPROVED.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        username = context.get("username", "there")
        title = context.get("artwork_title", "your artwork")
        return {
            "subject": f"Approved: {title}",
            "body": (
                f"Hello {username},\n\n"
                f"\"{title}\" has been approved and is now visible to buyers on the marketplace.\n\n"
                f"{SIGNATURE}"
            ),
        }
