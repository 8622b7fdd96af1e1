"""Purchase refunded template: sent to a buyer who paid for an artwork that had already sold."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)
from notifications.templates.signature import SIGNATURE


class PurchaseRefundedTemplate:
    notification_type = NotificationType.PURCHASE_REFUNDED.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        username = context.get("username", "there")
        title = context.get("artwork_title", "the artwork")
        return {
            "subject": f"Purchase Refunded: {title}",
            "body": (
                f"Hello {username},\n\n"
                f"We're sorry: \"{title}\" was sold to another collector before your "
                "payment could be applied.\n\n"
                "Your payment is being refunded in full to your original payment method. "
                "Refunds usually appear within 5 to 10 business days.\n\n"
                f"{SIGNATURE}"
            ),
        }
