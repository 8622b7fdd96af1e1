"""Gallery domain API package."""

from gallery.api.routes import admin_artwork_router, analytics_router, artwork_router

__all__ = ["artwork_router", "admin_artwork_router", "analytics_router"]
