"""Social domain ports."""

from .authentication_manager import AuthenticationManager, UserDetails, UserDetailsService
from .authentication_service import SocialAuthenticationService
from .connection_factory import ConnectionFactory
from .provider_registry import ProviderRegistry
from .repository import ConnectionRepository, UsersConnectionRepository

__all__ = [
    "AuthenticationManager",
    "ConnectionFactory",
    "ConnectionRepository",
    "ProviderRegistry",
    "SocialAuthenticationService",
    "UserDetails",
    "UserDetailsService",
    "UsersConnectionRepository",
]
