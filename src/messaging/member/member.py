"""ChatMember aggregate: a user's standing in messaging.

Holds who the user has blocked, running message counters and presence. A
member exists for every registered user; its identity is the user id.
"""

import json
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from messaging.domain import messaging
from messaging.member.events import PresenceChanged, UserBlocked, UserUnblocked


@messaging.aggregate
class ChatMember:
    user_id = Identifier(identifier=True, required=True)
    username = String(max_length=30)
    blocked_user_ids = Text()  # JSON list
    total_sent = Integer(default=0, min_value=0)
    total_received = Integer(default=0, min_value=0)
    last_message_at = DateTime()
    is_online = Boolean(default=False)
    last_seen = DateTime()

    def blocked(self) -> list[str]:
        return json.loads(self.blocked_user_ids) if self.blocked_user_ids else []

    def has_blocked(self, user_id) -> bool:
        return str(user_id) in self.blocked()

    def block(self, user_id) -> None:
        if str(user_id) == str(self.user_id):
            raise ValidationError({"user_id": ["You cannot block yourself"]})
        if self.has_blocked(user_id):
            return

        self.blocked_user_ids = json.dumps(self.blocked() + [str(user_id)])
        self.raise_(UserBlocked(user_id=self.user_id, blocked_user_id=user_id, blocked_at=datetime.now(UTC)))

    def unblock(self, user_id) -> None:
        if not self.has_blocked(user_id):
            return

        self.blocked_user_ids = json.dumps([blocked for blocked in self.blocked() if blocked != str(user_id)])
        self.raise_(UserUnblocked(user_id=self.user_id, unblocked_user_id=user_id, unblocked_at=datetime.now(UTC)))

    def record_sent(self, sent_at: datetime) -> None:
        self.total_sent = (self.total_sent or 0) + 1
        self.last_message_at = sent_at

    def record_received(self, sent_at: datetime) -> None:
        self.total_received = (self.total_received or 0) + 1
        self.last_message_at = sent_at

    def set_presence(self, is_online: bool) -> None:
        now = datetime.now(UTC)
        self.is_online = is_online
        self.last_seen = now
        self.raise_(PresenceChanged(user_id=self.user_id, is_online=is_online, changed_at=now))


def get_member(user_id) -> ChatMember:
    try:
        return current_domain.repository_for(ChatMember).get(user_id)
    except ObjectNotFoundError as exc:
        raise ObjectNotFoundError(f"User with id `{user_id}` does not exist.") from exc
