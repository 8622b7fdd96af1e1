"""Cross-domain event contracts for Identity domain events.

These classes mirror the shape of the source-of-truth events in
src/identity/user/events.py. Consuming domains register them as external
events via domain.register_external_event() with matching __type__ strings
so Protean's stream deserialization works correctly.
"""

from protean.core.event import BaseEvent
from protean.fields import Boolean, DateTime, Identifier, String


class UserRegistered(BaseEvent):
    """A new user account was created on the marketplace."""

    __version__ = 1

    user_id = Identifier(required=True)
    username = String(required=True)
    email = String(required=True)
    role = String(required=True)
    is_verified = Boolean(default=False)
    registered_at = DateTime(required=True)


class VerificationCodeIssued(BaseEvent):
    """A one-time email verification code was issued to a user."""

    __version__ = 1

    user_id = Identifier(required=True)
    username = String(required=True)
    email = String(required=True)
    code = String(required=True)
    expires_at = DateTime(required=True)


class EmailVerified(BaseEvent):
    """A user confirmed ownership of their email address."""

    __version__ = 1

    user_id = Identifier(required=True)
    username = String(required=True)
    email = String(required=True)
    role = String(required=True)
    verified_at = DateTime(required=True)


class PasswordResetRequested(BaseEvent):
    """A password reset token was issued to a user."""

    __version__ = 1

    user_id = Identifier(required=True)
    username = String(required=True)
    email = String(required=True)
    token = String(required=True)
    expires_at = DateTime(required=True)
