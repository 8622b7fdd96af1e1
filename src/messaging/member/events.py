"""Domain events for the ChatMember aggregate."""

from protean.fields import Boolean, DateTime, Identifier

from messaging.domain import messaging


@messaging.event(part_of="ChatMember")
class UserBlocked:
    __version__ = 1

    user_id = Identifier(required=True)
    blocked_user_id = Identifier(required=True)
    blocked_at = DateTime(required=True)


@messaging.event(part_of="ChatMember")
class UserUnblocked:
    __version__ = 1

    user_id = Identifier(required=True)
    unblocked_user_id = Identifier(required=True)
    unblocked_at = DateTime(required=True)


@messaging.event(part_of="ChatMember")
class PresenceChanged:
    __version__ = 1

    user_id = Identifier(required=True)
    is_online = Boolean(required=True)
    changed_at = DateTime(required=True)
