"""Channel adapter registry: pluggable email dispatch.

Uses the fake adapter by default. Set ``EMAIL_CHANNEL=resend`` (with
``RESEND_API_KEY`` and optionally ``EMAIL_FROM``) to send real email.
"""

import os

from notifications.notification.notification import NotificationChannel

_channel_instances: dict[str, object] = {}


def _build_email_adapter():
    if os.environ.get("EMAIL_CHANNEL", "fake").lower() == "resend":
        from notifications.channel.resend_email import ResendEmailAdapter

        return ResendEmailAdapter(
            api_key=os.environ.get("RESEND_API_KEY", ""),
            sender=os.environ.get("EMAIL_FROM"),
        )

    from notifications.channel.fake_email import FakeEmailAdapter

    return FakeEmailAdapter()


def get_channel(channel_type: str = NotificationChannel.EMAIL.value):
    """Return the configured channel adapter (singleton per channel type)."""
    if channel_type not in _channel_instances:
        if channel_type != NotificationChannel.EMAIL.value:
            raise ValueError(f"Unknown channel type: {channel_type}")
        _channel_instances[channel_type] = _build_email_adapter()

    return _channel_instances[channel_type]


def set_channel(channel_type: str, adapter) -> None:
    _channel_instances[channel_type] = adapter


def reset_channels():
    """Reset all channel singletons (useful for testing)."""
    _channel_instances.clear()
