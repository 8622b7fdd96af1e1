"""Pydantic request/response schemas for the Identity API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class RegisterUserRequest(BaseModel):
    username: str = Field(min_length=3, max_length=30)
    email: str = Field(max_length=254)
    password: str = Field(min_length=8, max_length=72)
    role: str = "buyer"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "username": "mira_paints",
                    "email": "mira@example.com",
                    "password": "correct-horse-battery",
                    "role": "artist",
                }
            ]
        }
    }


class VerifyEmailRequest(BaseModel):
    email: str
    code: str = Field(min_length=6, max_length=6)


class EmailRequest(BaseModel):
    email: str


class LoginRequest(BaseModel):
    email: str
    password: str


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str = Field(min_length=8, max_length=72)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8, max_length=72)


class SocialLinks(BaseModel):
    instagram: str | None = None
    twitter: str | None = None
    facebook: str | None = None


class UpdateProfileRequest(BaseModel):
    bio: str | None = Field(default=None, max_length=500)
    website: str | None = Field(default=None, max_length=255)
    social_links: SocialLinks | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class UserIdResponse(BaseModel):
    user_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class ProfileResponse(BaseModel):
    bio: str | None = None
    website: str | None = None
    social_links: dict[str, str] = {}


class PublicUserResponse(BaseModel):
    user_id: str
    username: str
    role: str
    profile: ProfileResponse


class CurrentUserResponse(PublicUserResponse):
    email: str
    is_verified: bool
    credits: int
    registered_at: datetime | None = None
    last_login_at: datetime | None = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: CurrentUserResponse


class UserDirectoryEntry(BaseModel):
    user_id: str
    username: str
    email: str
    role: str
    is_verified: bool
    registered_at: datetime | None = None
    last_login_at: datetime | None = None


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class UserListResponse(BaseModel):
    users: list[UserDirectoryEntry]
    pagination: PaginationMeta


class UserStatsResponse(BaseModel):
    total_users: int
    verified_users: int
    new_users_last_30_days: int
    by_role: dict[str, int]
