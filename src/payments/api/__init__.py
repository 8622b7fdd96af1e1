"""Payments domain API package."""

from payments.api.routes import admin_transaction_router, payment_router

__all__ = ["payment_router", "admin_transaction_router"]
