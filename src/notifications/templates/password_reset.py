"""Password reset template: links to the frontend reset page."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)
from notifications.templates.signature import SIGNATURE


class PasswordResetTemplate:
    notification_type = NotificationType.PASSWORD_RESET.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        username = context.get("username", "there")
        return {
            "subject": "Password Reset - 3rd Hand Art Marketplace",
            "body": (
                f"Hello {username},\n\n"
                "You requested a password reset for your 3rd Hand Art Marketplace account.\n\n"
                f"Reset your password here: {context['reset_url']}\n\n"
                "This link will expire in 10 minutes.\n\n"
                "If you didn't request a password reset, please ignore this email.\n\n"
                f"{SIGNATURE}"
            ),
        }
