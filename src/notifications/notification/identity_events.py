"""Inbound cross-domain event handler: Notifications reacts to Identity events.

Sends the verification code, password reset link and welcome emails, and
keeps the Recipient address book current.
"""

import os

import structlog
from notifications.domain import notifications
from notifications.notification.helpers import create_notification
from notifications.notification.notification import Notification, NotificationType
from notifications.projections.recipient import remember_recipient
from protean.utils.mixins import handle
from shared.events.identity import (
    EmailVerified,
    PasswordResetRequested,
    UserRegistered,
    VerificationCodeIssued,
)

logger = structlog.get_logger(__name__)

notifications.register_external_event(UserRegistered, "Identity.UserRegistered.v1")
notifications.register_external_event(VerificationCodeIssued, "Identity.VerificationCodeIssued.v1")
notifications.register_external_event(EmailVerified, "Identity.EmailVerified.v1")
notifications.register_external_event(PasswordResetRequested, "Identity.PasswordResetRequested.v1")

DEFAULT_FRONTEND_URL = "http://localhost:3000"


def frontend_url(path: str) -> str:
    base = os.environ.get("FRONTEND_URL", DEFAULT_FRONTEND_URL).rstrip("/")
    return f"{base}{path}"


@notifications.event_handler(part_of=Notification, stream_category="identity::user")
class IdentityEventsHandler:
    """Reacts to Identity domain events to email users about their account."""

    @handle(UserRegistered)
    def on_user_registered(self, event: UserRegistered) -> None:
        remember_recipient(
            user_id=event.user_id,
            email=event.email,
            username=event.username,
            role=event.role,
            registered_at=event.registered_at,
        )

    @handle(VerificationCodeIssued)
    def on_verification_code_issued(self, event: VerificationCodeIssued) -> None:
        remember_recipient(user_id=event.user_id, email=event.email, username=event.username)
        create_notification(
            recipient_id=str(event.user_id),
            recipient_email=event.email,
            notification_type=NotificationType.EMAIL_VERIFICATION.value,
            context={"username": event.username, "code": event.code},
            source_event_type="Identity.VerificationCodeIssued.v1",
            # A user can request several codes; each one is its own email
            source_event_id=f"{event.user_id}:{event.expires_at.isoformat()}",
        )

    @handle(PasswordResetRequested)
    def on_password_reset_requested(self, event: PasswordResetRequested) -> None:
        create_notification(
            recipient_id=str(event.user_id),
            recipient_email=event.email,
            notification_type=NotificationType.PASSWORD_RESET.value,
            context={
                "username": event.username,
                "reset_url": frontend_url(f"/reset-password?token={event.token}"),
            },
            source_event_type="Identity.PasswordResetRequested.v1",
            source_event_id=f"{event.user_id}:{event.expires_at.isoformat()}",
        )

    @handle(EmailVerified)
    def on_email_verified(self, event: EmailVerified) -> None:
        remember_recipient(user_id=event.user_id, email=event.email, username=event.username, role=event.role)
        create_notification(
            recipient_id=str(event.user_id),
            recipient_email=event.email,
            notification_type=NotificationType.WELCOME.value,
            context={
                "username": event.username,
                "role": event.role,
                "dashboard_url": frontend_url("/dashboard"),
            },
            source_event_type="Identity.EmailVerified.v1",
            source_event_id=str(event.user_id),
        )
