"""Password hashing and one-time secrets for user accounts."""

import hashlib
import os
import secrets

import bcrypt
from protean.exceptions import ValidationError

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 72  # bcrypt ignores anything past 72 bytes
OTP_DIGITS = 6


def _rounds() -> int:
    return int(os.environ.get("BCRYPT_ROUNDS", "12"))


def hash_password(password: str) -> str:
    """Validate ``password`` against the password policy and return its bcrypt hash."""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError({"password": [f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"]})
    if len(password.encode("utf-8")) > MAX_PASSWORD_LENGTH:
        raise ValidationError({"password": [f"Password must be at most {MAX_PASSWORD_LENGTH} bytes long"]})
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=_rounds())).decode("utf-8")


def verify_password(password: str, hashed: str | None) -> bool:
    if not password or not hashed:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def generate_otp() -> str:
    return f"{secrets.randbelow(10**OTP_DIGITS):0{OTP_DIGITS}d}"


def generate_reset_token() -> str:
    return secrets.token_urlsafe(32)


def digest(secret: str) -> str:
    """One-way digest for short-lived secrets (OTP codes, reset tokens)."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def digests_match(secret: str, expected_digest: str | None) -> bool:
    if not secret or not expected_digest:
        return False
    return secrets.compare_digest(digest(secret), expected_digest)
