"""Message aggregate root.

Messages between two users share a conversation id built from both user
ids, sorted, so either participant derives the same id.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, Text

from messaging.domain import messaging
from messaging.message.events import MessageSent

MAX_CONTENT_LENGTH = 2000


def conversation_id_for(user_a, user_b) -> str:
    return "_".join(sorted([str(user_a), str(user_b)]))


@messaging.aggregate
class Message:
    sender_id = Identifier(required=True)
    receiver_id = Identifier(required=True)
    conversation_id = String(required=True, max_length=255)
    content = Text(required=True)
    read = Boolean(default=False)
    sent_at = DateTime(required=True)
    read_at = DateTime()

    @invariant.post
    def content_within_limits(self):
        if not self.content or not self.content.strip():
            raise ValidationError({"content": ["Message content cannot be empty"]})
        if len(self.content) > MAX_CONTENT_LENGTH:
            raise ValidationError({"content": [f"Message cannot exceed {MAX_CONTENT_LENGTH} characters"]})

    @classmethod
    def compose(cls, sender_id, receiver_id, content):
        if str(sender_id) == str(receiver_id):
            raise ValidationError({"receiver_id": ["You cannot send a message to yourself"]})

        now = datetime.now(UTC)
        message = cls(
            sender_id=sender_id,
            receiver_id=receiver_id,
            conversation_id=conversation_id_for(sender_id, receiver_id),
            content=(content or "").strip(),
            sent_at=now,
        )
        message.raise_(
            MessageSent(
                message_id=message.id,
                conversation_id=message.conversation_id,
                sender_id=sender_id,
                receiver_id=receiver_id,
                content=message.content,
                sent_at=now,
            )
        )
        return message

    def mark_read(self, read_at: datetime) -> bool:
        if self.read:
            return False
        self.read = True
        self.read_at = read_at
        return True
