"""Dispatch states and the outcome of one dispatched request."""

from dataclasses import dataclass
from enum import StrEnum

from socialauth.domain.shared.error import SocialAuthError
from socialauth.domain.social.model.connection import Connection
from socialauth.domain.social.model.principal import Principal


class AuthState(StrEnum):
    """States of a social authentication request.

    START -> ROUTED -> {CONNECTING, LOGIN_PENDING, LOGIN_CALLBACK}
          -> {AUTHENTICATED, SIGNUP_PENDING, FAILED}

    LOGIN_PENDING is where a request ends when the browser has to visit the
    provider first; the flow resumes on the provider's callback request.
    """

    START = "start"
    ROUTED = "routed"
    CONNECTING = "connecting"
    LOGIN_PENDING = "login_pending"
    LOGIN_CALLBACK = "login_callback"
    AUTHENTICATED = "authenticated"
    SIGNUP_PENDING = "signup_pending"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({AuthState.AUTHENTICATED, AuthState.SIGNUP_PENDING, AuthState.FAILED})


@dataclass(frozen=True)
class DispatchOutcome:
    """Where a dispatched request ended up and where the browser goes next."""

    state: AuthState
    redirect_url: str
    provider_id: str | None = None
    principal: Principal | None = None
    connection: Connection | None = None
    error: SocialAuthError | None = None

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error is not None else None
