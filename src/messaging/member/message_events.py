"""Keeps each member's message counters current as messages are sent."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from messaging.domain import logger, messaging
from messaging.member.member import ChatMember
from messaging.message.events import MessageSent


@messaging.event_handler(part_of=ChatMember, stream_category="messaging::message")
class MessageStatsEventHandler:
    @handle(MessageSent)
    def on_message_sent(self, event: MessageSent) -> None:
        repo = current_domain.repository_for(ChatMember)
        for user_id, record in (
            (event.sender_id, ChatMember.record_sent),
            (event.receiver_id, ChatMember.record_received),
        ):
            try:
                member = repo.get(user_id)
            except ObjectNotFoundError:
                logger.warning("Message stats for unknown member", user_id=str(user_id))
                continue
            record(member, event.sent_at)
            repo.add(member)
