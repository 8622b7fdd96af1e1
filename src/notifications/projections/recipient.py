"""Recipient: email address book of marketplace users.

Payments and Gallery events carry only user ids. Notifications resolves
them to an address and a greeting name through this view, which is kept up
to date from Identity events.
"""

from notifications.domain import notifications
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain


@notifications.projection
class Recipient:
    user_id: Identifier(identifier=True, required=True)
    email: String(required=True, max_length=254)
    username: String(max_length=30)
    role: String(max_length=20)
    registered_at: DateTime()


def find_recipient(user_id) -> Recipient | None:
    try:
        return current_domain.repository_for(Recipient).get(str(user_id))
    except ObjectNotFoundError:
        return None


def remember_recipient(user_id, email, username=None, role=None, registered_at=None) -> None:
    """Insert or refresh the address book entry for a user."""
    repo = current_domain.repository_for(Recipient)
    recipient = find_recipient(user_id)
    if recipient is None:
        repo.add(
            Recipient(
                user_id=str(user_id),
                email=email,
                username=username,
                role=role,
                registered_at=registered_at,
            )
        )
        return

    recipient.email = email
    if username:
        recipient.username = username
    if role:
        recipient.role = role
    repo.add(recipient)
