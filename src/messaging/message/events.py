"""Domain events for the Message aggregate."""

from protean.fields import DateTime, Identifier, String, Text

from messaging.domain import messaging


@messaging.event(part_of="Message")
class MessageSent:
    __version__ = 1

    message_id = Identifier(required=True)
    conversation_id = String(required=True)
    sender_id = Identifier(required=True)
    receiver_id = Identifier(required=True)
    content = Text(required=True)
    sent_at = DateTime(required=True)
