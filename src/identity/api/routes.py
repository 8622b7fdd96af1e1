"""FastAPI endpoints for the Identity domain."""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from identity.api.schemas import (
    ChangePasswordRequest,
    CurrentUserResponse,
    EmailRequest,
    LoginRequest,
    LoginResponse,
    PaginationMeta,
    ProfileResponse,
    PublicUserResponse,
    RegisterUserRequest,
    ResetPasswordRequest,
    StatusResponse,
    UpdateProfileRequest,
    UserDirectoryEntry,
    UserIdResponse,
    UserListResponse,
    UserStatsResponse,
    VerifyEmailRequest,
)
from identity.projections.user_directory import list_users, user_stats
from identity.user import security
from identity.user.authentication import authenticate
from identity.user.password import RequestPasswordReset, ResetPassword, change_password
from identity.user.profile import UpdateProfile
from identity.user.registration import RegisterUser
from identity.user.user import User
from identity.user.verification import ResendVerificationCode, VerifyEmail
from shared.auth import Principal, get_current_principal, require_admin


def _profile(user: User) -> ProfileResponse:
    return ProfileResponse(
        bio=user.profile.bio if user.profile else None,
        website=user.profile.website if user.profile else None,
        social_links=user.social_links_dict(),
    )


def _current_user(user: User) -> CurrentUserResponse:
    return CurrentUserResponse(
        user_id=str(user.id),
        username=user.username,
        role=user.role,
        profile=_profile(user),
        email=user.email.address,
        is_verified=user.is_verified,
        credits=user.credits,
        registered_at=user.registered_at,
        last_login_at=user.last_login_at,
    )


# ---------------------------------------------------------------------------
# Auth Router
# ---------------------------------------------------------------------------
auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("/register", status_code=201, response_model=UserIdResponse)
async def register_user(body: RegisterUserRequest) -> UserIdResponse:
    """Create an account. A verification code is emailed to the address."""
    command = RegisterUser(
        username=body.username,
        email=body.email,
        password_hash=security.hash_password(body.password),
        role=body.role,
    )
    result = current_domain.process(command, asynchronous=False)
    return UserIdResponse(user_id=result)


@auth_router.post("/verify-email", response_model=StatusResponse)
async def verify_email(body: VerifyEmailRequest) -> StatusResponse:
    current_domain.process(VerifyEmail(email=body.email, code=body.code), asynchronous=False)
    return StatusResponse(status="verified")


@auth_router.post("/resend-otp", response_model=StatusResponse)
async def resend_verification_code(body: EmailRequest) -> StatusResponse:
    current_domain.process(ResendVerificationCode(email=body.email), asynchronous=False)
    return StatusResponse(status="code_sent")


@auth_router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest) -> LoginResponse:
    result = authenticate(body.email, body.password)
    return LoginResponse(access_token=result.access_token, user=_current_user(result.user))


@auth_router.post("/forgot-password", response_model=StatusResponse)
async def forgot_password(body: EmailRequest) -> StatusResponse:
    """Always succeeds so the response does not reveal which emails are registered."""
    current_domain.process(RequestPasswordReset(email=body.email), asynchronous=False)
    return StatusResponse(status="reset_requested")


@auth_router.post("/reset-password", response_model=StatusResponse)
async def reset_password(body: ResetPasswordRequest) -> StatusResponse:
    command = ResetPassword(
        token=body.token,
        password_hash=security.hash_password(body.new_password),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="password_reset")


# ---------------------------------------------------------------------------
# User Router
# ---------------------------------------------------------------------------
user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.get("/me", response_model=CurrentUserResponse)
async def get_me(principal: Principal = Depends(get_current_principal)) -> CurrentUserResponse:
    user = current_domain.repository_for(User).get(principal.user_id)
    return _current_user(user)


@user_router.put("/me/profile", response_model=StatusResponse)
async def update_my_profile(
    body: UpdateProfileRequest,
    principal: Principal = Depends(get_current_principal),
) -> StatusResponse:
    social_links = None
    if body.social_links is not None:
        social_links = json.dumps(body.social_links.model_dump(exclude_none=True))

    command = UpdateProfile(
        user_id=principal.user_id,
        bio=body.bio,
        website=body.website,
        social_links=social_links,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@user_router.put("/me/password", response_model=StatusResponse)
async def change_my_password(
    body: ChangePasswordRequest,
    principal: Principal = Depends(get_current_principal),
) -> StatusResponse:
    change_password(principal.user_id, body.current_password, body.new_password)
    return StatusResponse(status="password_changed")


@user_router.get("/{user_id}", response_model=PublicUserResponse)
async def get_public_profile(user_id: str) -> PublicUserResponse:
    user = current_domain.repository_for(User).get(user_id)
    return PublicUserResponse(
        user_id=str(user.id),
        username=user.username,
        role=user.role,
        profile=_profile(user),
    )


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_user_router = APIRouter(prefix="/admin/users", tags=["admin"])


@admin_user_router.get("", response_model=UserListResponse)
async def list_all_users(
    role: str | None = None,
    is_verified: bool | None = None,
    search: str | None = None,
    sort: str = "-registered_at",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    _admin: Principal = Depends(require_admin),
) -> UserListResponse:
    result = list_users(
        role=role,
        is_verified=is_verified,
        search=search,
        sort=sort,
        page=page,
        limit=limit,
    )
    return UserListResponse(
        users=[
            UserDirectoryEntry(
                user_id=str(row.user_id),
                username=row.username,
                email=row.email,
                role=row.role,
                is_verified=row.is_verified,
                registered_at=row.registered_at,
                last_login_at=row.last_login_at,
            )
            for row in result.items
        ],
        pagination=PaginationMeta(**result.meta()),
    )


@admin_user_router.get("/stats", response_model=UserStatsResponse)
async def get_user_stats(_admin: Principal = Depends(require_admin)) -> UserStatsResponse:
    return UserStatsResponse(**user_stats())
