"""User aggregate root with the Profile value object.

A User is a marketplace account. Its role decides what it may do elsewhere
on the platform: artists list artworks, buyers purchase them, admins
moderate. Email ownership is proven with a short-lived one-time code before
the account can log in.
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String, Text, ValueObject

from identity.domain import identity
from identity.shared.email import EmailAddress
from identity.user import security
from identity.user.events import (
    EmailVerified,
    PasswordChanged,
    PasswordResetRequested,
    ProfileUpdated,
    UserLoggedIn,
    UserRegistered,
    VerificationCodeIssued,
)

OTP_TTL = timedelta(minutes=10)
RESET_TOKEN_TTL = timedelta(minutes=10)

SOCIAL_NETWORKS = ("instagram", "twitter", "facebook")

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


class UserRole(Enum):
    ARTIST = "artist"
    BUYER = "buyer"
    ADMIN = "admin"


SELF_SERVICE_ROLES = (UserRole.ARTIST.value, UserRole.BUYER.value)


@identity.value_object(part_of="User")
class Profile:
    """Public profile shown next to a user's artworks and messages."""

    bio: String(max_length=500)
    website: String(max_length=255)
    social_links: Text()  # JSON object keyed by network name

    @invariant.post
    def only_known_social_networks(self):
        if not self.social_links:
            return
        links = json.loads(self.social_links)
        unknown = sorted(set(links) - set(SOCIAL_NETWORKS))
        if unknown:
            raise ValidationError({"social_links": [f"Unsupported social networks: {', '.join(unknown)}"]})


@identity.aggregate
class User:
    """A marketplace account identified by a unique username and email."""

    username: String(required=True, min_length=3, max_length=30)
    email: ValueObject(EmailAddress, required=True)
    password_hash: String(required=True, max_length=255)
    role: String(choices=UserRole, default=UserRole.BUYER.value)
    credits: Integer(default=0, min_value=0)
    profile: ValueObject(Profile)
    is_verified: Boolean(default=False)
    otp_digest: String(max_length=64)
    otp_expires_at: DateTime()
    reset_token_digest: String(max_length=64)
    reset_token_expires_at: DateTime()
    registered_at: DateTime()
    last_login_at: DateTime()

    @classmethod
    def register(cls, username, email, password_hash, role=UserRole.BUYER.value):
        if role not in SELF_SERVICE_ROLES:
            raise ValidationError({"role": [f"Role must be one of: {', '.join(SELF_SERVICE_ROLES)}"]})

        return cls._create(username, email, password_hash, role)

    @classmethod
    def provision_admin(cls, username, email, password_hash):
        """Create a verified administrator. Only reachable from the management CLI."""
        return cls._create(username, email, password_hash, UserRole.ADMIN.value, is_verified=True)

    @classmethod
    def _create(cls, username, email, password_hash, role, is_verified=False):
        email_vo = EmailAddress.normalized(email)
        now = datetime.now(UTC)

        user = cls(
            username=username.strip(),
            email=email_vo,
            password_hash=password_hash,
            role=role,
            is_verified=is_verified,
            registered_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=user.id,
                username=user.username,
                email=email_vo.address,
                role=role,
                is_verified=is_verified,
                registered_at=now,
            )
        )
        return user

    # -------------------------------------------------------------------
    # Email verification
    # -------------------------------------------------------------------
    def issue_verification_code(self) -> str:
        """Generate a fresh one-time code, replacing any previous one."""
        if self.is_verified:
            raise ValidationError({"email": ["Email address is already verified"]})

        code = security.generate_otp()
        expires_at = datetime.now(UTC) + OTP_TTL
        self.otp_digest = security.digest(code)
        self.otp_expires_at = expires_at

        self.raise_(
            VerificationCodeIssued(
                user_id=self.id,
                username=self.username,
                email=self.email.address,
                code=code,
                expires_at=expires_at,
            )
        )
        return code

    def verify_email(self, code: str) -> None:
        if self.is_verified:
            raise ValidationError({"email": ["Email address is already verified"]})
        if not self.otp_digest or _is_expired(self.otp_expires_at):
            raise ValidationError({"code": ["Verification code has expired"]})
        if not security.digests_match(code, self.otp_digest):
            raise ValidationError({"code": ["Invalid verification code"]})

        now = datetime.now(UTC)
        self.is_verified = True
        self.otp_digest = None
        self.otp_expires_at = None

        self.raise_(
            EmailVerified(
                user_id=self.id,
                username=self.username,
                email=self.email.address,
                role=self.role,
                verified_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Credentials
    # -------------------------------------------------------------------
    def check_password(self, password: str) -> bool:
        return security.verify_password(password, self.password_hash)

    def record_login(self) -> None:
        now = datetime.now(UTC)
        self.last_login_at = now
        self.raise_(UserLoggedIn(user_id=self.id, logged_in_at=now))

    def request_password_reset(self) -> str:
        token = security.generate_reset_token()
        expires_at = datetime.now(UTC) + RESET_TOKEN_TTL
        self.reset_token_digest = security.digest(token)
        self.reset_token_expires_at = expires_at

        self.raise_(
            PasswordResetRequested(
                user_id=self.id,
                username=self.username,
                email=self.email.address,
                token=token,
                expires_at=expires_at,
            )
        )
        return token

    def reset_password(self, token: str, new_password_hash: str) -> None:
        if not security.digests_match(token, self.reset_token_digest) or _is_expired(self.reset_token_expires_at):
            raise ValidationError({"token": ["Password reset token is invalid or has expired"]})

        self.reset_token_digest = None
        self.reset_token_expires_at = None
        self._set_password(new_password_hash)

    def change_password(self, new_password_hash: str) -> None:
        self._set_password(new_password_hash)

    def _set_password(self, new_password_hash: str) -> None:
        self.password_hash = new_password_hash
        self.raise_(PasswordChanged(user_id=self.id, changed_at=datetime.now(UTC)))

    # -------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------
    def update_profile(self, bio=_UNSET, website=_UNSET, social_links=_UNSET) -> None:
        current = self.profile

        new_bio = bio if bio is not _UNSET else (current.bio if current else None)
        new_website = website if website is not _UNSET else (current.website if current else None)
        if social_links is not _UNSET:
            new_links = json.dumps(social_links) if social_links else None
        else:
            new_links = current.social_links if current else None

        self.profile = Profile(bio=new_bio, website=new_website, social_links=new_links)
        self.raise_(
            ProfileUpdated(
                user_id=self.id,
                bio=new_bio,
                website=new_website,
                social_links=new_links,
                updated_at=datetime.now(UTC),
            )
        )

    def social_links_dict(self) -> dict:
        if not self.profile or not self.profile.social_links:
            return {}
        return json.loads(self.profile.social_links)


def _is_expired(expires_at: datetime | None) -> bool:
    if expires_at is None:
        return True
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=UTC)
    return expires_at <= datetime.now(UTC)
