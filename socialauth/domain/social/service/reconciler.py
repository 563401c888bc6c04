"""Reconciles external identities against local user connections."""

import logging

from socialauth.domain.shared.service import Service
from socialauth.domain.social.error import AmbiguousAccountError, DuplicateConnectionError
from socialauth.domain.social.model.connection import Connection
from socialauth.domain.social.model.value import ConnectionCardinality, ConnectionData, UserId
from socialauth.domain.social.port.authentication_service import SocialAuthenticationService
from socialauth.domain.social.port.repository import UsersConnectionRepository

logger = logging.getLogger(__name__)


class ConnectionReconciler(Service):
    """Finds and creates connections between local users and external accounts.

    Owns the connection cardinality rule: both the login lookup and connection
    creation go through _enforce_cardinality().
    """

    _users_connection_repo: UsersConnectionRepository

    async def find_local_users(self, provider_id: str, provider_user_ids: set[str]) -> set[UserId]:
        """Get ids of local users connected to any of the given external accounts."""
        return await self._users_connection_repo.find_user_ids_connected_to(
            provider_id, provider_user_ids
        )

    async def resolve_local_user(
        self,
        service: SocialAuthenticationService,
        data: ConnectionData,
    ) -> UserId | None:
        """Find the single local user an external account signs in as.

        Returns:
            The connected user, or None if no local user is connected yet

        Raises:
            AmbiguousAccountError: If more than one local user is connected, or
                any user is connected under ONE_TO_MANY cardinality
        """
        connected = await self.find_local_users(data.provider_id, {data.provider_user_id})
        self._enforce_cardinality(service.connection_cardinality, data, connected)
        return next(iter(connected), None)

    async def add_connection(
        self,
        service: SocialAuthenticationService,
        user_id: UserId,
        data: ConnectionData,
    ) -> Connection:
        """Connect an external account to a local user.

        Nothing is written when the cardinality check fails. Callers deciding
        between login and signup must look up existing users first; this call
        alone is not idempotent.

        Raises:
            DuplicateConnectionError: If the account is already connected to this
                user, or to another user under ONE_TO_ONE cardinality
        """
        connection_repo = self._users_connection_repo.create_connection_repository(user_id)
        connection = service.build_connection(data)

        connected = await self.find_local_users(data.provider_id, {data.provider_user_id})
        self._enforce_cardinality(service.connection_cardinality, data, connected, user_id)

        await connection_repo.add_connection(connection)
        logger.info(
            "Connection added: user_id=%s, provider=%s, provider_user_id=%s",
            user_id,
            data.provider_id,
            data.provider_user_id,
        )
        return connection

    async def update_connection(
        self,
        service: SocialAuthenticationService,
        user_id: UserId,
        data: ConnectionData,
    ) -> Connection:
        """Refresh the stored profile and credentials of an existing connection."""
        connection_repo = self._users_connection_repo.create_connection_repository(user_id)
        connection = service.build_connection(data)
        await connection_repo.update_connection(connection)
        logger.debug("Connection updated: user_id=%s, key=%s", user_id, data.key)
        return connection

    @staticmethod
    def _enforce_cardinality(
        cardinality: ConnectionCardinality,
        data: ConnectionData,
        connected: set[UserId],
        user_id: UserId | None = None,
    ) -> None:
        """Check the users already connected to `data` against the cardinality rule.

        Without `user_id` this is a sign-in lookup. It needs at most one match, and
        under ONE_TO_MANY any match is ambiguous because the account may be shared.
        With `user_id` the account is about to be connected to that user.
        """
        if user_id is None:
            if len(connected) > 1 or (connected and cardinality.is_multi_user_id):
                logger.error(
                    "External account connected to %d local users: key=%s, cardinality=%s",
                    len(connected),
                    data.key,
                    cardinality,
                )
                raise AmbiguousAccountError(
                    f"{len(connected)} local accounts are connected to "
                    f"{data.provider_id} account {data.provider_user_id}"
                )
            return

        if user_id in connected:
            raise DuplicateConnectionError(
                f"{data.provider_id} account {data.provider_user_id} is already connected "
                f"to this user"
            )
        if connected and not cardinality.is_multi_user_id:
            raise DuplicateConnectionError(
                f"{data.provider_id} account {data.provider_user_id} is already connected "
                f"to another user"
            )
