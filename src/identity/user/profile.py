"""Profile update: command and handler."""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from identity.domain import identity
from identity.user.user import User


@identity.command(part_of="User")
class UpdateProfile:
    """Replace the provided profile fields; omitted fields are kept."""

    user_id: Identifier(required=True)
    bio: String(max_length=500)
    website: String(max_length=255)
    social_links: Text()  # JSON object, omitted when unchanged


@identity.command_handler(part_of=User)
class UpdateProfileHandler:
    @handle(UpdateProfile)
    def update_profile(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)

        changes = {}
        if command.bio is not None:
            changes["bio"] = command.bio
        if command.website is not None:
            changes["website"] = command.website
        if command.social_links is not None:
            changes["social_links"] = json.loads(command.social_links)

        user.update_profile(**changes)
        repo.add(user)
