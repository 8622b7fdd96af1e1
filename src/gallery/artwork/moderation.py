"""Admin moderation: approve or reject pending artworks."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from gallery.artwork.artwork import Artwork
from gallery.domain import gallery, logger


@gallery.command(part_of="Artwork")
class ApproveArtwork:
    artwork_id = Identifier(required=True)
    admin_id = Identifier(required=True)


@gallery.command(part_of="Artwork")
class RejectArtwork:
    artwork_id = Identifier(required=True)
    admin_id = Identifier(required=True)
    reason = String(max_length=500)


@gallery.command_handler(part_of=Artwork)
class ModerationHandler:
    @handle(ApproveArtwork)
    def approve_artwork(self, command):
        repo = current_domain.repository_for(Artwork)
        artwork = repo.get(command.artwork_id)
        artwork.approve()
        repo.add(artwork)
        logger.info("Artwork approved", artwork_id=str(artwork.id), admin_id=str(command.admin_id))

    @handle(RejectArtwork)
    def reject_artwork(self, command):
        repo = current_domain.repository_for(Artwork)
        artwork = repo.get(command.artwork_id)
        artwork.reject(command.reason)
        repo.add(artwork)
        logger.info("Artwork rejected", artwork_id=str(artwork.id), admin_id=str(command.admin_id))
