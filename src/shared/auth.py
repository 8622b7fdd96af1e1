"""Bearer token authentication shared by every context's API.

Tokens are HS256 JWTs issued by the identity context at login. Other
contexts only verify them; they never call into identity.
"""

import os
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shared.errors import AuthenticationFailed

JWT_ALGORITHM = "HS256"
DEFAULT_EXPIRES_MINUTES = 7 * 24 * 60

_DEVELOPMENT_SECRET = "thirdhand-development-secret"

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as carried in the token claims."""

    user_id: str
    role: str
    email: str
    username: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def _secret() -> str:
    secret = os.environ.get("JWT_SECRET")
    if secret:
        return secret
    if os.environ.get("PROTEAN_ENV") == "production":
        raise RuntimeError("JWT_SECRET must be set in production")
    return _DEVELOPMENT_SECRET


def issue_token(user_id: str, role: str, email: str, username: str) -> str:
    """Sign an access token for the given user."""
    expires_minutes = int(os.environ.get("JWT_EXPIRES_MINUTES", DEFAULT_EXPIRES_MINUTES))
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "role": role,
        "email": email,
        "username": username,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, _secret(), algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Principal:
    """Verify a token and return its principal."""
    try:
        payload = jwt.decode(token, _secret(), algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationFailed("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationFailed("Invalid token") from exc

    try:
        return Principal(
            user_id=payload["sub"],
            role=payload["role"],
            email=payload["email"],
            username=payload["username"],
        )
    except KeyError as exc:
        raise AuthenticationFailed("Invalid token") from exc


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal:
    """FastAPI dependency: the authenticated caller, or 401."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        return decode_token(credentials.credentials)
    except AuthenticationFailed as exc:
        raise _unauthorized(str(exc)) from exc


def get_optional_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal | None:
    """FastAPI dependency: the caller when a valid token is sent, else None."""
    if credentials is None:
        return None
    try:
        return decode_token(credentials.credentials)
    except AuthenticationFailed:
        return None


def require_role(*roles: str):
    """Build a dependency that admits only callers holding one of ``roles``."""

    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(roles)}",
            )
        return principal

    return dependency


require_admin = require_role("admin")

