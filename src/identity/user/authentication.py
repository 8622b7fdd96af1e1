"""Login: verify credentials, record the login, and issue an access token."""

from dataclasses import dataclass

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from identity.domain import identity, logger
from identity.projections.user_lookup import find_user_by_email
from identity.user.user import User
from shared.auth import issue_token
from shared.errors import AuthenticationFailed, PermissionDenied


@identity.command(part_of="User")
class RecordLogin:
    user_id: Identifier(required=True)


@identity.command_handler(part_of=User)
class RecordLoginHandler:
    @handle(RecordLogin)
    def record_login(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.record_login()
        repo.add(user)


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    user: User


def authenticate(email: str, password: str) -> LoginResult:
    """Check credentials and return a signed token for the user.

    Unknown emails and wrong passwords fail identically.
    """
    user = find_user_by_email(email)
    if user is None or not user.check_password(password):
        logger.info("Login rejected", email=email)
        raise AuthenticationFailed("Invalid email or password")

    if not user.is_verified:
        raise PermissionDenied("Email address is not verified")

    current_domain.process(RecordLogin(user_id=user.id), asynchronous=False)

    token = issue_token(
        user_id=str(user.id),
        role=user.role,
        email=user.email.address,
        username=user.username,
    )
    return LoginResult(access_token=token, user=user)
