"""Sale notification template: sent to the seller."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)
from notifications.templates.signature import SIGNATURE


class SaleNotificationTemplate:
    notification_type = NotificationType.SALE_NOTIFICATION.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        username = context.get("username", "there")
        title = context.get("artwork_title", "your artwork")
        amount = context.get("amount", "0.00")
        earnings = context.get("earnings", amount)
        return {
            "subject": f"Your artwork \"{title}\" has sold!",
            "body": (
                f"Hello {username},\n\n"
                f"Great news: \"{title}\" has just been sold for €{amount}.\n\n"
                f"Your earnings after the platform commission: €{earnings}\n\n"
                f"{SIGNATURE}"
            ),
        }
