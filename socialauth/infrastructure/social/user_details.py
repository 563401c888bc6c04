"""UserDetailsService backed by configuration."""

from socialauth.domain.social.model.value import UserId
from socialauth.domain.social.port.authentication_manager import UserDetails, UserDetailsService


class ConfiguredUserDetailsService(UserDetailsService):
    """Treats every connected user id as an enabled user with the default authorities.

    Local accounts belong to the host application; hosts that track roles or
    disabled accounts provide their own UserDetailsService.
    """

    def __init__(self, default_authorities: list[str]) -> None:
        self._authorities = frozenset(default_authorities)

    async def load_user(self, user_id: UserId) -> UserDetails | None:
        return UserDetails(user_id=user_id, authorities=self._authorities)
