"""Blocking: commands and handler.

A block works both ways: neither user can message the other until it is
lifted by the user who placed it.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from messaging.domain import messaging
from messaging.member.member import ChatMember, get_member


@messaging.command(part_of="ChatMember")
class BlockUser:
    user_id = Identifier(required=True)
    blocked_user_id = Identifier(required=True)


@messaging.command(part_of="ChatMember")
class UnblockUser:
    user_id = Identifier(required=True)
    blocked_user_id = Identifier(required=True)


@messaging.command_handler(part_of=ChatMember)
class BlockingHandler:
    @handle(BlockUser)
    def block_user(self, command):
        member = get_member(command.user_id)
        get_member(command.blocked_user_id)
        member.block(command.blocked_user_id)
        current_domain.repository_for(ChatMember).add(member)

    @handle(UnblockUser)
    def unblock_user(self, command):
        member = get_member(command.user_id)
        member.unblock(command.blocked_user_id)
        current_domain.repository_for(ChatMember).add(member)
