"""HTTP API for the Notifications domain."""

from notifications.api.routes import router as notification_router

__all__ = ["notification_router"]
