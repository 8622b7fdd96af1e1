"""Purchase confirmation template: sent to the buyer."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)
from notifications.templates.signature import SIGNATURE


class PurchaseConfirmationTemplate:
    notification_type = NotificationType.PURCHASE_CONFIRMATION.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        username = context.get("username", "there")
        title = context.get("artwork_title", "your artwork")
        amount = context.get("amount", "0.00")
        return {
            "subject": f"Purchase Confirmed: {title}",
            "body": (
                f"Hello {username},\n\n"
                f"Congratulations! You are now the owner of \"{title}\".\n\n"
                f"Amount paid: €{amount}\n\n"
                "The artwork's provenance record has been updated with the transfer.\n\n"
                f"{SIGNATURE}"
            ),
        }
