"""Provider registry port for the social domain."""

from abc import abstractmethod
from typing import Protocol

from socialauth.domain.shared.port import Port
from socialauth.domain.social.error import UnknownProviderError
from socialauth.domain.social.port.authentication_service import SocialAuthenticationService


class ProviderRegistry(Port, Protocol):
    """Registry of available identity providers.

    Registration happens while the application is composed; request handling
    only ever looks providers up.
    """

    @abstractmethod
    def register(self, provider_id: str, service: SocialAuthenticationService) -> None:
        """Add a provider, replacing any provider registered under the same id."""
        ...

    @abstractmethod
    def get(self, provider_id: str) -> SocialAuthenticationService | None:
        """Get a provider by id.

        Args:
            provider_id: The provider id (e.g., "github")

        Returns:
            The provider if registered, None otherwise
        """
        ...

    @abstractmethod
    def available_providers(self) -> list[str]:
        """Get list of registered provider ids."""
        ...

    def resolve(self, provider_id: str) -> SocialAuthenticationService:
        """Get a provider by id.

        Raises:
            UnknownProviderError: If no provider is registered under that id
        """
        service = self.get(provider_id)
        if service is None:
            available = ", ".join(self.available_providers()) or "none"
            raise UnknownProviderError(
                f"Unknown provider: {provider_id}. Available: {available}",
            )
        return service

    def is_available(self, provider_id: str) -> bool:
        """Check if a provider is registered."""
        return provider_id in self.available_providers()
