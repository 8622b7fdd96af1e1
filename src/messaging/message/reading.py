"""Marking a conversation as read: command and handler."""

from datetime import UTC, datetime

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from messaging.domain import messaging
from messaging.message.message import Message, conversation_id_for
from shared.paging import iterate


@messaging.command(part_of="Message")
class MarkConversationRead:
    """Mark every unread message the reader received from the other user as read."""

    reader_id = Identifier(required=True)
    other_user_id = Identifier(required=True)


@messaging.command_handler(part_of=Message)
class ReadingHandler:
    @handle(MarkConversationRead)
    def mark_conversation_read(self, command):
        repo = current_domain.repository_for(Message)
        unread = list(
            iterate(
                repo._dao.query.filter(
                    conversation_id=conversation_id_for(command.reader_id, command.other_user_id),
                    receiver_id=command.reader_id,
                    read=False,
                )
            )
        )

        now = datetime.now(UTC)
        for message in unread:
            message.mark_read(now)
            repo.add(message)
        return len(unread)
