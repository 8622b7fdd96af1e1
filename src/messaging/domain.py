"""Messaging bounded context: direct messages between marketplace users.

Buyers and artists talk one-to-one. Messages are grouped into conversations
by the pair of participants, users can block each other, and connected
clients receive new messages over a WebSocket.
"""

import structlog
from protean.domain import Domain

messaging = Domain(name="messaging")

logger = structlog.get_logger(__name__)
