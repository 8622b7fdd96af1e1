"""Payment failed template."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)
from notifications.templates.signature import SIGNATURE

_PAYMENT_KINDS = {
    "listing_fee": "listing fee",
    "sale": "purchase",
}


class PaymentFailedTemplate:
    notification_type = NotificationType.PAYMENT_FAILED.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        username = context.get("username", "there")
        title = context.get("artwork_title", "your artwork")
        kind = _PAYMENT_KINDS.get(context.get("transaction_type"), "payment")
        reason = context.get("reason", "The payment could not be completed")
        return {
            "subject": "Payment Failed - 3rd Hand Art Marketplace",
            "body": (
                f"Hello {username},\n\n"
                f"Your {kind} payment for \"{title}\" did not go through.\n\n"
                f"Reason: {reason}\n\n"
                "No money has been taken. You can start a new checkout at any time.\n\n"
                f"{SIGNATURE}"
            ),
        }
