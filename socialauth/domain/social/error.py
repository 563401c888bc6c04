"""Errors raised by the social sign-in flow.

Each carries a stable ``code``; failure redirects expose it to the browser as
the ``error`` query parameter.
"""

from socialauth.domain.shared.error import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
)


class UnknownProviderError(NotFoundError):
    """No provider is registered under the requested id."""

    default_code = "unknown_provider"


class ProviderAuthDeniedError(AuthorizationError):
    """The provider reported that the user cancelled or denied access."""

    default_code = "provider_auth_denied"


class DuplicateConnectionError(ConflictError):
    """The external account is already connected where cardinality forbids another link."""

    default_code = "duplicate_connection"


class AmbiguousAccountError(InvalidStateError):
    """Several local users are connected to one external account."""

    default_code = "ambiguous_account"


class SessionUnavailableError(InvalidStateError):
    """A sign-in attempt had to be recorded but the request has no session."""

    default_code = "session_unavailable"


class AuthenticationError(AuthorizationError):
    """The authentication manager rejected the token."""

    default_code = "authentication_failed"


class SocialAuthenticationRedirect(Exception):
    """Raised by a provider when the browser must visit the provider first.

    Not an error: the dispatcher answers with a redirect to ``url`` and the flow
    continues on the provider's callback request.
    """

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(url)
