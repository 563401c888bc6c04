"""Ambient security context for the request being processed.

Backed by a ContextVar, so each asyncio task (and each request handled by the
ASGI server) sees its own value. Threads started during a request do not
inherit it.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from socialauth.domain.social.model.principal import Principal

_principal_var: ContextVar[Principal | None] = ContextVar(
    "socialauth.security_context.principal", default=None
)


class SecurityContextBinder:
    """Sets and clears the authenticated principal of the current request."""

    def current(self) -> Principal | None:
        return _principal_var.get()

    def bind(self, principal: Principal) -> None:
        _principal_var.set(principal)

    def clear(self) -> None:
        _principal_var.set(None)

    @contextmanager
    def request_scope(self, principal: Principal | None = None) -> Iterator[None]:
        """Run one unit of request processing with its own security context.

        Whatever the unit binds or clears is discarded on exit, including when it
        raises.
        """
        token = _principal_var.set(principal)
        try:
            yield
        finally:
            _principal_var.reset(token)
