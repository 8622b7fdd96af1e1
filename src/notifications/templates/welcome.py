"""Welcome template: sent once a user has verified their email address."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)
from notifications.templates.signature import SIGNATURE


class WelcomeTemplate:
    notification_type = NotificationType.WELCOME.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        username = context.get("username", "there")
        if context.get("role") == "artist":
            next_steps = (
                "As an artist, you can now start uploading your artwork and reach art lovers "
                "worldwide. Remember, there's a €1 listing fee for each artwork you post."
            )
        else:
            next_steps = (
                "As a buyer, you can now browse and purchase amazing artwork from talented "
                "artists around the world."
            )
        return {
            "subject": "Welcome to 3rd Hand Art Marketplace!",
            "body": (
                f"Hello {username},\n\n"
                "Your account has been successfully verified! Welcome to the 3rd Hand community.\n\n"
                f"{next_steps}\n\n"
                f"Go to your dashboard: {context.get('dashboard_url', '')}\n\n"
                "If you have any questions, feel free to contact our support team.\n\n"
                f"{SIGNATURE}"
            ),
        }
