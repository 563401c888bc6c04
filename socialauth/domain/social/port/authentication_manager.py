"""Authentication ports."""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Protocol

from socialauth.domain.shared.port import Port
from socialauth.domain.social.model.principal import Principal
from socialauth.domain.social.model.token import SocialAuthenticationToken
from socialauth.domain.social.model.value import UserId


class AuthenticationManager(Port, Protocol):
    """Turns a reconciled social token into an authenticated principal."""

    @abstractmethod
    async def authenticate(self, token: SocialAuthenticationToken) -> Principal:
        """Authenticate a token.

        Raises:
            AuthenticationError: If the token does not identify a usable local account
        """
        ...


@dataclass(frozen=True)
class UserDetails:
    """What the host application knows about a local user."""

    user_id: UserId
    authorities: frozenset[str] = field(default_factory=frozenset)
    enabled: bool = True


class UserDetailsService(Port, Protocol):
    """Looks up local users by id."""

    @abstractmethod
    async def load_user(self, user_id: UserId) -> UserDetails | None:
        """Get a local user, or None if there is no such user."""
        ...
