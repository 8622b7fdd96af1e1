"""Shared steps for opening a checkout session and recording the transaction."""

import os
from datetime import timedelta

from protean.utils.globals import current_domain

from payments.customer.customer import ensure_gateway_customer
from payments.domain import logger
from payments.gateway import get_gateway
from payments.transaction.transaction import CURRENCY, Transaction

# Hosted checkout sessions expire after this long without payment
CHECKOUT_TTL = timedelta(minutes=30)

DEFAULT_FRONTEND_URL = "http://localhost:3000"


def _frontend_url() -> str:
    return os.environ.get("FRONTEND_URL", DEFAULT_FRONTEND_URL).rstrip("/")


def open_checkout(
    transaction_type: str,
    user_id: str,
    email: str,
    artwork_id: str,
    artwork_title: str,
    seller_id: str,
    amount_cents: int,
    product_name: str,
    description: str,
    buyer_id: str | None = None,
) -> dict:
    """Open a gateway checkout for the caller and record a pending transaction.

    Returns ``{"transaction_id", "session_id", "url"}``.
    """
    customer_id = ensure_gateway_customer(user_id, email)

    transaction = Transaction.draft()
    metadata = {
        "type": transaction_type,
        "artwork_id": str(artwork_id),
        "user_id": str(user_id),
        "transaction_id": str(transaction.id),
    }
    frontend = _frontend_url()
    session = get_gateway().create_checkout_session(
        customer_id=customer_id,
        amount_cents=amount_cents,
        currency=CURRENCY,
        product_name=product_name,
        description=description,
        metadata=metadata,
        success_url=f"{frontend}/payment/success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{frontend}/payment/cancel?artwork_id={artwork_id}",
    )

    transaction.start(
        transaction_type=transaction_type,
        artwork_id=artwork_id,
        artwork_title=artwork_title,
        seller_id=seller_id,
        buyer_id=buyer_id,
        amount_cents=amount_cents,
        checkout_session_id=session.session_id,
    )
    current_domain.repository_for(Transaction).add(transaction)

    logger.info(
        "Checkout session opened",
        transaction_id=str(transaction.id),
        transaction_type=transaction_type,
        artwork_id=str(artwork_id),
        session_id=session.session_id,
    )
    return {
        "transaction_id": str(transaction.id),
        "session_id": session.session_id,
        "url": session.url,
    }
