"""Provider registry implementation."""

import logging
import threading
from collections.abc import Mapping
from types import MappingProxyType

from socialauth.domain.social.port.authentication_service import SocialAuthenticationService
from socialauth.domain.social.port.provider_registry import ProviderRegistry

logger = logging.getLogger(__name__)


class InMemoryProviderRegistry(ProviderRegistry):
    """In-memory provider registry.

    Stores an immutable snapshot of provider ids to their implementations.
    Registration builds a new snapshot and swaps it in, so lookups need no lock
    and never see a partially applied registration. Providers are registered at
    application startup via DI.
    """

    def __init__(self, providers: Mapping[str, SocialAuthenticationService] | None = None) -> None:
        """Initialize registry with optional initial providers.

        Args:
            providers: Optional mapping of provider ids to implementations
        """
        self._lock = threading.Lock()
        self._providers: Mapping[str, SocialAuthenticationService] = MappingProxyType(
            dict(providers or {})
        )

    def get(self, provider_id: str) -> SocialAuthenticationService | None:
        return self._providers.get(provider_id)

    def available_providers(self) -> list[str]:
        return list(self._providers.keys())

    def register(self, provider_id: str, service: SocialAuthenticationService) -> None:
        """Register a provider, replacing any existing one with the same id."""
        with self._lock:
            providers = dict(self._providers)
            if provider_id in providers:
                logger.info("Replacing provider: %s", provider_id)
            providers[provider_id] = service
            self._providers = MappingProxyType(providers)
        logger.debug("Registered provider: %s -> %s", provider_id, type(service).__name__)
