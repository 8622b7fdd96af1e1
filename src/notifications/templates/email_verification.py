"""Email verification template: carries the one-time code."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)
from notifications.templates.signature import SIGNATURE


class EmailVerificationTemplate:
    notification_type = NotificationType.EMAIL_VERIFICATION.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        username = context.get("username", "there")
        code = context["code"]
        return {
            "subject": "Verify Your Email - 3rd Hand Art Marketplace",
            "body": (
                f"Hello {username},\n\n"
                "Thank you for registering with 3rd Hand. Please verify your email address "
                "using the code below:\n\n"
                f"    {code}\n\n"
                "This code will expire in 10 minutes.\n\n"
                "If you didn't create an account with us, please ignore this email.\n\n"
                f"{SIGNATURE}"
            ),
        }
