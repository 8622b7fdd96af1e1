"""Identity bounded context: marketplace accounts.

Owns users and their roles (artist, buyer, admin), email verification with
one-time codes, password login and reset, and public profiles. Other
contexts learn about users only through the events published here.
"""

import structlog
from protean.domain import Domain

identity = Domain(name="identity")

logger = structlog.get_logger(__name__)
