"""Provider capability port for the social domain."""

from abc import abstractmethod
from typing import Protocol

from starlette.requests import Request

from socialauth.domain.shared.port import Port
from socialauth.domain.social.model.connection import Connection
from socialauth.domain.social.model.value import ConnectionCardinality, ConnectionData
from socialauth.domain.social.port.connection_factory import ConnectionFactory


class SocialAuthenticationService(Port, Protocol):
    """Everything the dispatcher needs from one external identity provider.

    Implementations are plugins (see socialauth.sdk.provider for base classes).
    """

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g., 'github')."""
        ...

    @property
    @abstractmethod
    def connection_cardinality(self) -> ConnectionCardinality:
        """Whether one external account may belong to several local users."""
        ...

    @property
    @abstractmethod
    def connection_factory(self) -> ConnectionFactory:
        """Factory that turns provider data into connections."""
        ...

    @abstractmethod
    async def obtain_external_identity(self, request: Request) -> ConnectionData | None:
        """Obtain the verified external identity for this request.

        Args:
            request: The current HTTP request (initial hit or provider callback)

        Returns:
            The external account data, or None if the provider produced no identity

        Raises:
            SocialAuthenticationRedirect: If the browser must visit the provider first
            ProviderAuthDeniedError: If the user cancelled or denied access
            ExternalServiceError: If the provider could not be reached
        """
        ...

    @abstractmethod
    def build_connection(self, data: ConnectionData) -> Connection:
        """Build a connection from provider data via the connection factory."""
        ...

    @abstractmethod
    def connection_added_redirect_url(self, request: Request, connection: Connection) -> str:
        """Where to send the browser after a connection was added."""
        ...
