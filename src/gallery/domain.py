"""Gallery bounded context: artwork listings, moderation and provenance.

Artists submit artworks, pay a listing fee and wait for an administrator
to approve them. Every ownership change is appended to the artwork's
traceability chain. Payments drive listing-fee status and sales through
the events they publish.
"""

import structlog
from protean.domain import Domain

gallery = Domain(name="gallery")

logger = structlog.get_logger(__name__)
