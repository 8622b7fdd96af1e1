"""Owner edits: update listing details or withdraw an unsold artwork."""

import json

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from gallery.artwork.artwork import Artwork
from gallery.artwork.submission import build_dimensions, build_edition
from gallery.domain import gallery


@gallery.command(part_of="Artwork")
class UpdateArtwork:
    """Change listing details. Fields left as None are kept."""

    artwork_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    title = String(max_length=100)
    description = Text()
    price = Float(min_value=0.0)
    images = Text()  # JSON list
    tags = Text()  # JSON list
    medium = String(max_length=100)
    width = Float()
    height = Float()
    unit = String(max_length=2)
    year = Integer()
    is_original = Boolean()
    edition_number = Integer()
    edition_total = Integer()


@gallery.command(part_of="Artwork")
class WithdrawArtwork:
    artwork_id = Identifier(required=True)
    actor_id = Identifier(required=True)


@gallery.command_handler(part_of=Artwork)
class ArtworkEditingHandler:
    @handle(UpdateArtwork)
    def update_artwork(self, command):
        repo = current_domain.repository_for(Artwork)
        artwork = repo.get(command.artwork_id)

        changes = {
            name: getattr(command, name)
            for name in ("title", "description", "price", "medium", "year", "is_original")
            if getattr(command, name) is not None
        }
        if command.images is not None:
            changes["images"] = json.loads(command.images)
        if command.tags is not None:
            changes["tags"] = json.loads(command.tags)
        if command.width is not None or command.height is not None:
            changes["dimensions"] = build_dimensions(command.width, command.height, command.unit)
        if command.edition_number is not None or command.edition_total is not None:
            changes["edition"] = build_edition(command.edition_number, command.edition_total)

        artwork.update_details(command.actor_id, **changes)
        repo.add(artwork)

    @handle(WithdrawArtwork)
    def withdraw_artwork(self, command):
        repo = current_domain.repository_for(Artwork)
        artwork = repo.get(command.artwork_id)
        artwork.withdraw(command.actor_id)
        repo.add(artwork)
