"""Presence: records when a member connects or disconnects."""

from protean import handle
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain

from messaging.domain import messaging
from messaging.member.member import ChatMember, get_member


@messaging.command(part_of="ChatMember")
class SetPresence:
    user_id = Identifier(required=True)
    is_online = Boolean(required=True)


@messaging.command_handler(part_of=ChatMember)
class PresenceHandler:
    @handle(SetPresence)
    def set_presence(self, command):
        member = get_member(command.user_id)
        member.set_presence(command.is_online)
        current_domain.repository_for(ChatMember).add(member)
