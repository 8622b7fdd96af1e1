"""Email verification: verify a one-time code, or issue a new one."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import String
from protean.utils.globals import current_domain

from identity.domain import identity
from identity.projections.user_lookup import find_user_by_email
from identity.user.user import User


@identity.command(part_of="User")
class VerifyEmail:
    email: String(required=True, max_length=254)
    code: String(required=True, max_length=10)


@identity.command(part_of="User")
class ResendVerificationCode:
    email: String(required=True, max_length=254)


def _user_for(email) -> User:
    user = find_user_by_email(email)
    if user is None:
        raise ObjectNotFoundError(f"No account registered for {email}")
    return user


@identity.command_handler(part_of=User)
class VerificationHandler:
    @handle(VerifyEmail)
    def verify_email(self, command):
        user = _user_for(command.email)
        user.verify_email(command.code.strip())
        current_domain.repository_for(User).add(user)

    @handle(ResendVerificationCode)
    def resend_code(self, command):
        user = _user_for(command.email)
        user.issue_verification_code()
        current_domain.repository_for(User).add(user)
