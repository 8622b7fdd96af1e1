"""Payments bounded context: listing fees, sales and gateway reconciliation.

Transactions are event sourced. A checkout session is opened with the
payment gateway, a pending transaction is recorded, and the gateway's
webhook later completes, fails or refunds it exactly once.
"""

import structlog
from protean.domain import Domain

payments = Domain(name="payments")

logger = structlog.get_logger(__name__)
