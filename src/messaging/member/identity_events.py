"""Inbound cross-domain event handler: Messaging reacts to Identity events.

Every registered user becomes a chat member, so messages can only be sent
to accounts that exist.

Cross-domain events are imported from shared.events.identity and registered
as external events via messaging.register_external_event().
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from messaging.domain import messaging
from messaging.member.member import ChatMember
from shared.events.identity import UserRegistered

logger = structlog.get_logger(__name__)

messaging.register_external_event(UserRegistered, "Identity.UserRegistered.v1")


@messaging.event_handler(part_of=ChatMember, stream_category="identity::user")
class IdentityMemberEventHandler:
    @handle(UserRegistered)
    def on_user_registered(self, event: UserRegistered) -> None:
        repo = current_domain.repository_for(ChatMember)
        if repo._dao.query.filter(user_id=event.user_id).all().total:
            return  # Redelivered

        repo.add(ChatMember(user_id=event.user_id, username=event.username))
        logger.info("Chat member created", user_id=str(event.user_id))
