"""Password reset and change: commands and handlers."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from identity.domain import identity, logger
from identity.projections.user_lookup import find_user_by_email
from identity.user import security
from identity.user.user import User
from shared.errors import AuthenticationFailed


@identity.command(part_of="User")
class RequestPasswordReset:
    email: String(required=True, max_length=254)


@identity.command(part_of="User")
class ResetPassword:
    token: String(required=True, max_length=255)
    password_hash: String(required=True, max_length=255)


@identity.command(part_of="User")
class ChangePassword:
    user_id: Identifier(required=True)
    password_hash: String(required=True, max_length=255)


@identity.command_handler(part_of=User)
class PasswordHandler:
    @handle(RequestPasswordReset)
    def request_reset(self, command):
        user = find_user_by_email(command.email)
        if user is None:
            # Same answer whether or not the account exists
            logger.info("Password reset requested for unknown email")
            return
        user.request_password_reset()
        current_domain.repository_for(User).add(user)

    @handle(ResetPassword)
    def reset_password(self, command):
        repo = current_domain.repository_for(User)
        matches = repo._dao.query.filter(reset_token_digest=security.digest(command.token)).all().items
        if not matches:
            raise ValidationError({"token": ["Password reset token is invalid or has expired"]})

        user = matches[0]
        user.reset_password(command.token, command.password_hash)
        repo.add(user)

    @handle(ChangePassword)
    def change_password(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.change_password(command.password_hash)
        repo.add(user)


def change_password(user_id: str, current_password: str, new_password: str) -> None:
    """Verify the current password before replacing it."""
    user = current_domain.repository_for(User).get(user_id)
    if not user.check_password(current_password):
        raise AuthenticationFailed("Current password is incorrect")

    current_domain.process(
        ChangePassword(user_id=user_id, password_hash=security.hash_password(new_password)),
        asynchronous=False,
    )
