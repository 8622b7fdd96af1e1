"""Messaging domain API package."""

from messaging.api.routes import message_router, ws_router

__all__ = ["message_router", "ws_router"]
