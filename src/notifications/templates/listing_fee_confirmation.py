"""Listing fee confirmation template: the artist's fee payment went through."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)
from notifications.templates.signature import SIGNATURE


class ListingFeeConfirmationTemplate:
    notification_type = NotificationType.LISTING_FEE_CONFIRMATION.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        username = context.get("username", "there")
        title = context.get("artwork_title", "your artwork")
        amount = context.get("amount", "1.00")
        return {
            "subject": "Listing Fee Received - 3rd Hand Art Marketplace",
            "body": (
                f"Hello {username},\n\n"
                f"We received your listing fee of €{amount} for \"{title}\".\n\n"
                "Your artwork is now waiting for review by our team. We'll let you know "
                "as soon as it is approved.\n\n"
                f"{SIGNATURE}"
            ),
        }
