"""Artwork submission: command and handler.

The route admits only callers with the artist role, so the handler trusts
``artist_id``.
"""

import json

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from gallery.artwork.artwork import Artwork, Dimensions, Edition
from gallery.domain import gallery


@gallery.command(part_of="Artwork")
class SubmitArtwork:
    """List a new artwork. It stays pending until the fee is paid and an admin approves it."""

    artist_id = Identifier(required=True)
    artist_name = String(max_length=30)
    title = String(required=True, max_length=100)
    description = Text(required=True)
    price = Float(required=True, min_value=0.0)
    images = Text(required=True)  # JSON list
    tags = Text()  # JSON list
    medium = String(max_length=100)
    width = Float()
    height = Float()
    unit = String(max_length=2)
    year = Integer()
    is_original = Boolean(default=True)
    edition_number = Integer()
    edition_total = Integer()


def build_dimensions(width, height, unit):
    if width is None and height is None:
        return None
    return Dimensions(width=width, height=height, unit=unit or "cm")


def build_edition(number, total):
    if number is None and total is None:
        return None
    return Edition(number=number, total=total)


@gallery.command_handler(part_of=Artwork)
class SubmitArtworkHandler:
    @handle(SubmitArtwork)
    def submit_artwork(self, command):
        artwork = Artwork.submit(
            artist_id=command.artist_id,
            artist_name=command.artist_name,
            title=command.title,
            description=command.description,
            price=command.price,
            images=json.loads(command.images),
            tags=json.loads(command.tags) if command.tags else [],
            medium=command.medium,
            dimensions=build_dimensions(command.width, command.height, command.unit),
            year=command.year,
            is_original=command.is_original if command.is_original is not None else True,
            edition=build_edition(command.edition_number, command.edition_total),
        )
        current_domain.repository_for(Artwork).add(artwork)
        return str(artwork.id)
