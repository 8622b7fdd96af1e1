"""Third Hand FastAPI application.

Multi-domain web server that processes commands synchronously via HTTP.
Each request is wrapped in the correct domain context based on URL prefix.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import os
import time
from uuid import uuid4

import structlog

from shared.logging import add_context, clear_context, configure_logging

configure_logging()

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Domains are initialized at module level so uvicorn workers share them.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (projectors fire in UoW)
#   - "production" → event_processing = "async" (projectors fire via Engine)
from fastapi import Depends, FastAPI, Request  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from gallery.domain import gallery  # noqa: E402
from identity.domain import identity  # noqa: E402
from messaging.domain import messaging  # noqa: E402
from notifications.domain import notifications  # noqa: E402
from payments.domain import payments  # noqa: E402

identity.init()
gallery.init()
payments.init()
messaging.init()
notifications.init()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
_ROUTE_DOMAIN_MAP = {
    "/auth": identity,
    "/users": identity,
    "/admin/users": identity,
    "/artworks": gallery,
    "/admin/artworks": gallery,
    "/analytics": gallery,
    "/payments": payments,
    "/admin/transactions": payments,
    "/messages": messaging,
    "/notifications": notifications,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path == prefix or path.startswith(prefix + "/"):
            return domain
    return None


def _cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Third Hand API",
    description="Art marketplace with accounts, artworks, payments, messaging and notifications",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    clear_context()
    request_id = request.headers.get("X-Request-ID") or uuid4().hex
    add_context(request_id=request_id, method=request.method, path=request.url.path)
    started = time.perf_counter()

    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
    else:
        # No domain match, pass through (health check, docs, websocket upgrade, overview)
        response = await call_next(request)

    response.headers["X-Request-ID"] = request_id
    logger.info(
        "Request handled",
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
    )
    return response


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------
from shared.errors import register_error_handlers  # noqa: E402

register_error_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from gallery.api import admin_artwork_router, analytics_router, artwork_router  # noqa: E402
from identity.api import admin_user_router, auth_router, user_router  # noqa: E402
from messaging.api import message_router, ws_router  # noqa: E402
from notifications.api import notification_router  # noqa: E402
from payments.api import admin_transaction_router, payment_router  # noqa: E402

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(admin_user_router)
app.include_router(artwork_router)
app.include_router(admin_artwork_router)
app.include_router(analytics_router)
app.include_router(payment_router)
app.include_router(admin_transaction_router)
app.include_router(message_router)
app.include_router(ws_router)
app.include_router(notification_router)


# ---------------------------------------------------------------------------
# Health / platform overview
# ---------------------------------------------------------------------------
from gallery.projections.artwork_listing import artwork_stats  # noqa: E402
from identity.projections.user_directory import user_stats  # noqa: E402
from payments.projections.transaction_record import transaction_summary  # noqa: E402
from shared.auth import Principal, require_admin  # noqa: E402


@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                domain.name: {"name": domain.name}
                for domain in (identity, gallery, payments, messaging, notifications)
            },
        }
    )


@app.get("/admin/overview")
async def admin_overview(_admin: Principal = Depends(require_admin)):
    """Dashboard totals gathered from each context's read models."""
    with identity.domain_context():
        users = user_stats()
    with gallery.domain_context():
        artworks = artwork_stats()
    with payments.domain_context():
        transactions = transaction_summary()

    return JSONResponse(content={"users": users, "artworks": artworks, "transactions": transactions})
