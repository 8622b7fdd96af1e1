"""Domain events for the User aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String, Text

from identity.domain import identity


@identity.event(part_of="User")
class UserRegistered:
    """A new user account was created on the marketplace."""

    __version__ = 1

    user_id = Identifier(required=True)
    username = String(required=True)
    email = String(required=True)
    role = String(required=True)
    is_verified = Boolean(default=False)
    registered_at = DateTime(required=True)


@identity.event(part_of="User")
class VerificationCodeIssued:
    """A one-time email verification code was issued.

    Carries the plain code because the notifications context has to email it.
    The aggregate itself keeps only a digest.
    """

    __version__ = 1

    user_id = Identifier(required=True)
    username = String(required=True)
    email = String(required=True)
    code = String(required=True)
    expires_at = DateTime(required=True)


@identity.event(part_of="User")
class EmailVerified:
    """The user confirmed ownership of their email address."""

    __version__ = 1

    user_id = Identifier(required=True)
    username = String(required=True)
    email = String(required=True)
    role = String(required=True)
    verified_at = DateTime(required=True)


@identity.event(part_of="User")
class UserLoggedIn:
    __version__ = 1

    user_id = Identifier(required=True)
    logged_in_at = DateTime(required=True)


@identity.event(part_of="User")
class PasswordResetRequested:
    """A password reset token was issued."""

    __version__ = 1

    user_id = Identifier(required=True)
    username = String(required=True)
    email = String(required=True)
    token = String(required=True)
    expires_at = DateTime(required=True)


@identity.event(part_of="User")
class PasswordChanged:
    __version__ = 1

    user_id = Identifier(required=True)
    changed_at = DateTime(required=True)


@identity.event(part_of="User")
class ProfileUpdated:
    __version__ = 1

    user_id = Identifier(required=True)
    bio = String()
    website = String()
    social_links = Text()
    updated_at = DateTime(required=True)
