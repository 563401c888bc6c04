"""Error hierarchy for socialauth.

Error layers:
- SocialAuthError: Base class for all socialauth errors
- DomainError: Business rule violations (4xx responses, failure redirects)
- InfrastructureError: Storage/network failures (503 responses)

The dispatcher turns every error into a failure redirect carrying ``code``.
JSON routes map them to HTTP responses via application/api/v1/errors.py.
"""


class SocialAuthError(Exception):
    """Base class for all socialauth errors."""

    default_code: str | None = None

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.default_code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (business logic violations - typically 4xx)
# =============================================================================


class DomainError(SocialAuthError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class InvalidStateError(DomainError):
    """Operation not allowed in current state."""


class ConflictError(DomainError):
    """Resource already exists."""


class AuthorizationError(DomainError):
    """Caller is not authenticated or not allowed to do this."""


# =============================================================================
# Infrastructure Errors (system-level failures - typically 503)
# =============================================================================


class InfrastructureError(SocialAuthError):
    """Base class for infrastructure/system errors."""


class StorageUnavailableError(InfrastructureError):
    """Connection storage is unavailable."""


class ExternalServiceError(InfrastructureError):
    """An identity provider is unavailable or answered with garbage."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
