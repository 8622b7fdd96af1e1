"""User registration: command and handler.

The route hashes the password before building the command, so plain
credentials never reach the command or event stores.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from identity.domain import identity
from identity.projections.user_lookup import find_user_by_email
from identity.user.user import User, UserRole


@identity.command(part_of="User")
class RegisterUser:
    """Create a new account and send its email verification code."""

    username: String(required=True, max_length=30)
    email: String(required=True, max_length=254)
    password_hash: String(required=True, max_length=255)
    role: String(max_length=20, default=UserRole.BUYER.value)


@identity.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        if find_user_by_email(command.email) is not None:
            raise ValidationError({"email": ["An account with this email already exists"]})

        repo = current_domain.repository_for(User)
        if repo._dao.query.filter(username=command.username.strip()).all().items:
            raise ValidationError({"username": ["This username is already taken"]})

        user = User.register(
            username=command.username,
            email=command.email,
            password_hash=command.password_hash,
            role=command.role or UserRole.BUYER.value,
        )
        user.issue_verification_code()
        repo.add(user)
        return str(user.id)


@identity.command(part_of="User")
class ProvisionAdmin:
    """Create a verified administrator account (management CLI only)."""

    username: String(required=True, max_length=30)
    email: String(required=True, max_length=254)
    password_hash: String(required=True, max_length=255)


@identity.command_handler(part_of=User)
class ProvisionAdminHandler:
    @handle(ProvisionAdmin)
    def provision_admin(self, command):
        if find_user_by_email(command.email) is not None:
            raise ValidationError({"email": ["An account with this email already exists"]})

        user = User.provision_admin(
            username=command.username,
            email=command.email,
            password_hash=command.password_hash,
        )
        current_domain.repository_for(User).add(user)
        return str(user.id)
