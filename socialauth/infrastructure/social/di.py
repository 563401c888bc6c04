import logging

from dishka import Provider, Scope, provide

from socialauth.config import Config
from socialauth.domain.social.port.authentication_manager import UserDetailsService
from socialauth.domain.social.port.provider_registry import ProviderRegistry
from socialauth.infrastructure.social.discovery import discover_providers, instantiate_providers
from socialauth.infrastructure.social.provider_registry import InMemoryProviderRegistry
from socialauth.infrastructure.social.user_details import ConfiguredUserDetailsService

logger = logging.getLogger(__name__)


class SocialInfraProvider(Provider):
    @provide(scope=Scope.APP)
    def get_provider_registry(self, config: Config) -> ProviderRegistry:
        """Instantiate the configured provider plugins once, at startup."""
        providers = instantiate_providers(config.social.providers, discover_providers())
        registry = InMemoryProviderRegistry(providers)
        logger.info("Social providers registered: %s", registry.available_providers() or "(none)")
        return registry

    @provide(scope=Scope.APP)
    def get_user_details_service(self, config: Config) -> UserDetailsService:
        return ConfiguredUserDetailsService(config.social.default_authorities)
