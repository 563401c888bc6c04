"""Default authentication manager for social sign-in tokens."""

import logging

from socialauth.domain.shared.service import Service
from socialauth.domain.social.error import AuthenticationError
from socialauth.domain.social.model.principal import Principal
from socialauth.domain.social.model.token import SocialAuthenticationToken
from socialauth.domain.social.port.authentication_manager import UserDetailsService
from socialauth.domain.social.port.repository import UsersConnectionRepository

logger = logging.getLogger(__name__)


class SocialAuthenticationManager(Service):
    """Authenticates tokens whose user is still connected to the external account.

    The connection is checked again at authentication time, so a connection
    removed between lookup and login is not honoured.
    """

    _users_connection_repo: UsersConnectionRepository
    _user_details_service: UserDetailsService

    async def authenticate(self, token: SocialAuthenticationToken) -> Principal:
        if token.user_id is None:
            raise AuthenticationError("Token is not bound to a local user", code="unbound_token")

        data = token.connection_data
        connected = await self._users_connection_repo.find_user_ids_connected_to(
            data.provider_id, {data.provider_user_id}
        )
        if token.user_id not in connected:
            raise AuthenticationError(
                f"{data.provider_id} account {data.provider_user_id} is not connected "
                f"to user {token.user_id}",
                code="bad_credentials",
            )

        details = await self._user_details_service.load_user(token.user_id)
        if details is None:
            raise AuthenticationError(f"Unknown user: {token.user_id}", code="user_not_found")
        if not details.enabled:
            raise AuthenticationError(f"User is disabled: {token.user_id}", code="user_disabled")

        logger.debug(
            "Token authenticated: user_id=%s, authorities=%s",
            details.user_id,
            sorted(details.authorities),
        )
        return Principal(
            user_id=details.user_id,
            authorities=details.authorities,
            provider_identity=data.key,
        )
