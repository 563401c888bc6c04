"""Map socialauth errors to HTTP responses."""

import logging

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from socialauth.domain.shared.error import (
    AuthorizationError,
    ConflictError,
    InfrastructureError,
    InvalidStateError,
    NotFoundError,
    SocialAuthError,
)
from socialauth.domain.social.error import AuthenticationError

logger = logging.getLogger(__name__)


def status_code_for(error: SocialAuthError) -> int:
    # AuthenticationError is an AuthorizationError, so it must be checked first
    if isinstance(error, AuthenticationError):
        return 401
    if isinstance(error, AuthorizationError):
        return 403
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ConflictError | InvalidStateError):
        return 409
    if isinstance(error, InfrastructureError):
        return 503
    return 400


def map_error(error: SocialAuthError) -> HTTPException:
    """Build the HTTPException a route raises for a socialauth error."""
    return HTTPException(
        status_code=status_code_for(error),
        detail={"code": error.code, "message": error.message},
    )


async def social_auth_error_handler(request: Request, exc: SocialAuthError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    else:
        logger.info("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"detail": {"code": exc.code, "message": exc.message}},
    )
