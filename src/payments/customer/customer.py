"""PaymentCustomer aggregate: a platform user's customer record at the gateway.

Created lazily on a user's first checkout and reused afterwards.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from payments.domain import logger, payments
from payments.gateway import get_gateway


@payments.aggregate
class PaymentCustomer:
    user_id = Identifier(identifier=True, required=True)
    email = String(max_length=254, required=True)
    gateway_customer_id = String(max_length=255, required=True)
    gateway = String(max_length=50, required=True)
    created_at = DateTime()


def ensure_gateway_customer(user_id: str, email: str, username: str | None = None) -> str:
    """Return the user's gateway customer id, creating the customer when missing."""
    gateway = get_gateway()
    gateway_name = type(gateway).__name__
    repo = current_domain.repository_for(PaymentCustomer)

    try:
        customer = repo.get(user_id)
    except ObjectNotFoundError:
        customer = None

    if customer is not None and customer.gateway == gateway_name:
        return customer.gateway_customer_id

    result = gateway.ensure_customer(user_id, email, username)
    if customer is None:
        customer = PaymentCustomer(
            user_id=user_id,
            email=email,
            gateway_customer_id=result.customer_id,
            gateway=gateway_name,
            created_at=datetime.now(UTC),
        )
    else:
        # The gateway was switched since this record was written
        customer.gateway_customer_id = result.customer_id
        customer.gateway = gateway_name
    repo.add(customer)

    logger.info("Gateway customer created", user_id=str(user_id), gateway=gateway_name)
    return result.customer_id
