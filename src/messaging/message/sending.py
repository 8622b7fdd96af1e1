"""Sending a message: command and handler."""

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from messaging.domain import messaging
from messaging.member.member import get_member
from messaging.message.message import Message
from shared.errors import PermissionDenied


@messaging.command(part_of="Message")
class SendMessage:
    sender_id = Identifier(required=True)
    receiver_id = Identifier(required=True)
    content = Text(required=True)


@messaging.command_handler(part_of=Message)
class SendMessageHandler:
    @handle(SendMessage)
    def send_message(self, command):
        sender = get_member(command.sender_id)
        receiver = get_member(command.receiver_id)
        if receiver.has_blocked(command.sender_id) or sender.has_blocked(command.receiver_id):
            raise PermissionDenied("Messaging between these users is blocked")

        message = Message.compose(command.sender_id, command.receiver_id, command.content)
        current_domain.repository_for(Message).add(message)
        return message
