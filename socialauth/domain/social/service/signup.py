"""Completion of signups that started with an external sign-in attempt."""

import logging

from socialauth.domain.shared.service import Service
from socialauth.domain.social.error import DuplicateConnectionError
from socialauth.domain.social.model.connection import Connection
from socialauth.domain.social.model.value import ConnectionData, UserId
from socialauth.domain.social.port.provider_registry import ProviderRegistry
from socialauth.domain.social.service.reconciler import ConnectionReconciler
from socialauth.domain.social.service.sign_in_attempts import Session, SignInAttemptStore

logger = logging.getLogger(__name__)


class SignupService(Service):
    """Connects pending sign-in attempts to a freshly created local user.

    - pending: what the signup form can be pre-filled from
    - complete: connect every pending attempt to the new user
    """

    _registry: ProviderRegistry
    _reconciler: ConnectionReconciler
    _attempts: SignInAttemptStore

    def pending(self, session: Session | None) -> list[ConnectionData]:
        return self._attempts.list(session)

    async def complete(self, session: Session | None, user_id: UserId) -> list[Connection]:
        """Connect all pending attempts to `user_id` and forget them.

        Attempts for providers that are no longer registered, and attempts whose
        account got connected in the meantime, are dropped without a connection.
        Other errors propagate and leave the remaining attempts pending.
        """
        added: list[Connection] = []

        for data in self._attempts.list(session):
            service = self._registry.get(data.provider_id)
            if service is None:
                logger.warning(
                    "Dropping sign-in attempt for unregistered provider: %s", data.provider_id
                )
            else:
                try:
                    added.append(await self._reconciler.add_connection(service, user_id, data))
                except DuplicateConnectionError as e:
                    logger.warning("Sign-in attempt not connected: %s", e.message)

            self._attempts.remove(session, data.key)

        logger.info("Signup completed: user_id=%s, connections=%d", user_id, len(added))
        return added
