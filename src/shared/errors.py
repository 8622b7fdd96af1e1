"""Application-level exceptions and their HTTP mappings.

Domain rule violations keep using Protean's ValidationError (400) and
ObjectNotFoundError (404), mapped by Protean's FastAPI integration. The two
exceptions below cover authentication and authorization, which Protean has
no opinion on.
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

logger = structlog.get_logger(__name__)


class AuthenticationFailed(Exception):
    """Credentials or token could not be verified."""


class PermissionDenied(Exception):
    """The caller is authenticated but not allowed to perform the operation."""


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    register_exception_handlers(app)

    @app.exception_handler(AuthenticationFailed)
    async def authentication_failed_handler(request: Request, exc: AuthenticationFailed):
        logger.info("Authentication failed", path=request.url.path, reason=str(exc))
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": str(exc) or "Authentication failed"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(PermissionDenied)
    async def permission_denied_handler(request: Request, exc: PermissionDenied):
        logger.info("Permission denied", path=request.url.path, reason=str(exc))
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"error": str(exc) or "Permission denied"},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info("Request validation failed", path=request.url.path, errors=exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Validation failed",
                "details": [
                    {"field": ".".join(str(part) for part in err["loc"][1:]), "message": err["msg"]}
                    for err in exc.errors()
                ],
            },
        )
