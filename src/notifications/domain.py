"""Notifications bounded context: transactional email for the marketplace.

Consumes events from Identity (verification codes, password resets,
welcome), Payments (listing fee and purchase confirmations, sale and
failure notices) and Gallery (moderation decisions). Each notification is
rendered from a template and sent through the email channel, with its
delivery status tracked for audit and retry.
"""

import structlog
from protean.domain import Domain

notifications = Domain(name="notifications")

logger = structlog.get_logger(__name__)
