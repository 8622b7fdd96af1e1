"""User directory: one row per account for the admin user listing."""

from datetime import UTC, datetime, timedelta

from protean.core.projector import on
from protean.fields import Boolean, DateTime, Identifier, String
from protean.utils.globals import current_domain

from identity.domain import identity
from identity.user.events import EmailVerified, UserLoggedIn, UserRegistered
from identity.user.user import User, UserRole
from shared.paging import Page, iterate, paginate

SORTABLE_FIELDS = {"registered_at", "username", "email", "last_login_at"}


@identity.projection
class UserDirectory:
    user_id: Identifier(identifier=True, required=True)
    username: String(required=True, max_length=30)
    email: String(required=True, max_length=254)
    role: String(required=True, max_length=20)
    is_verified: Boolean(default=False)
    search_text: String(max_length=300)
    registered_at: DateTime()
    last_login_at: DateTime()


@identity.projector(projector_for=UserDirectory, aggregates=[User])
class UserDirectoryProjector:
    @on(UserRegistered)
    def on_user_registered(self, event):
        current_domain.repository_for(UserDirectory).add(
            UserDirectory(
                user_id=event.user_id,
                username=event.username,
                email=event.email,
                role=event.role,
                is_verified=bool(event.is_verified),
                search_text=f"{event.username} {event.email}".lower(),
                registered_at=event.registered_at,
            )
        )

    @on(EmailVerified)
    def on_email_verified(self, event):
        repo = current_domain.repository_for(UserDirectory)
        row = repo.get(event.user_id)
        row.is_verified = True
        repo.add(row)

    @on(UserLoggedIn)
    def on_user_logged_in(self, event):
        repo = current_domain.repository_for(UserDirectory)
        row = repo.get(event.user_id)
        row.last_login_at = event.logged_in_at
        repo.add(row)


def list_users(role=None, is_verified=None, search=None, sort="-registered_at", page=1, limit=20) -> Page:
    """Admin listing with optional filters."""
    filters = {}
    if role:
        filters["role"] = role
    if is_verified is not None:
        filters["is_verified"] = is_verified
    if search:
        filters["search_text__contains"] = search.strip().lower()

    if sort.lstrip("-") not in SORTABLE_FIELDS:
        sort = "-registered_at"

    query = current_domain.repository_for(UserDirectory)._dao.query.filter(**filters).order_by(sort)
    return paginate(query, page=page, limit=limit)


def user_stats() -> dict:
    cutoff = datetime.now(UTC) - timedelta(days=30)
    stats = {
        "total_users": 0,
        "verified_users": 0,
        "new_users_last_30_days": 0,
        "by_role": {role.value: 0 for role in UserRole},
    }

    for row in iterate(current_domain.repository_for(UserDirectory)._dao.query):
        stats["total_users"] += 1
        stats["by_role"][row.role] = stats["by_role"].get(row.role, 0) + 1
        if row.is_verified:
            stats["verified_users"] += 1
        registered_at = row.registered_at
        if registered_at is not None and registered_at.tzinfo is None:
            registered_at = registered_at.replace(tzinfo=UTC)
        if registered_at is not None and registered_at >= cutoff:
            stats["new_users_last_30_days"] += 1

    return stats
