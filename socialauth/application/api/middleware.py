"""ASGI middleware binding the session's principal to the security context."""

import logging
from typing import Any

from starlette.types import ASGIApp, Receive, Scope, Send

from socialauth.domain.social.model.principal import Principal
from socialauth.domain.social.service.security_context import SecurityContextBinder

logger = logging.getLogger(__name__)

PRINCIPAL_SESSION_KEY = "socialauth.principal"


def load_principal(session: dict[str, Any] | None) -> Principal | None:
    """Read the signed-in principal from a session, dropping unreadable entries."""
    if not session:
        return None
    data = session.get(PRINCIPAL_SESSION_KEY)
    if data is None:
        return None
    try:
        return Principal.from_session(data)
    except (AttributeError, KeyError, TypeError, ValueError):
        logger.warning("Discarding malformed principal in session")
        session.pop(PRINCIPAL_SESSION_KEY, None)
        return None


def store_principal(session: dict[str, Any] | None, principal: Principal | None) -> None:
    if session is None:
        return
    if principal is None:
        session.pop(PRINCIPAL_SESSION_KEY, None)
    else:
        session[PRINCIPAL_SESSION_KEY] = principal.to_session()


class SecurityContextMiddleware:
    """Runs every HTTP request inside its own security context.

    Must sit inside SessionMiddleware so that ``scope["session"]`` is populated.
    """

    def __init__(self, app: ASGIApp, binder: SecurityContextBinder | None = None) -> None:
        self.app = app
        self.binder = binder or SecurityContextBinder()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        principal = load_principal(scope.get("session"))
        with self.binder.request_scope(principal):
            await self.app(scope, receive, send)
