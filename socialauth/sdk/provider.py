"""Base classes for identity provider plugins.

A plugin is a class registered under the "socialauth.providers" entry point
group. The entry point name is the provider id:

    [project.entry-points."socialauth.providers"]
    github = "socialauth_github:GitHubAuthenticationService"

Plugins are instantiated as ``cls(provider_id, config)`` where ``config`` is
an instance of the plugin's ``config_class`` built from the provider's
``config`` mapping in the application configuration.
"""

import hmac
import logging
import secrets
from abc import ABC, abstractmethod
from typing import ClassVar

from pydantic import BaseModel
from starlette.requests import Request

from socialauth.domain.social.error import (
    ProviderAuthDeniedError,
    SessionUnavailableError,
    SocialAuthenticationRedirect,
)
from socialauth.domain.social.model.connection import Connection
from socialauth.domain.social.model.value import ConnectionCardinality, ConnectionData
from socialauth.domain.social.port.connection_factory import ConnectionFactory

logger = logging.getLogger(__name__)


class ProviderSettings(BaseModel):
    """Settings every provider understands."""

    cardinality: ConnectionCardinality = ConnectionCardinality.ONE_TO_ONE
    # Falls back to social.connection_added_redirect_url
    connection_added_redirect_url: str | None = None


class DefaultConnectionFactory:
    """Connection factory that keeps the provider's data as is."""

    def __init__(self, provider_id: str) -> None:
        self._provider_id = provider_id

    @property
    def provider_id(self) -> str:
        return self._provider_id

    def create_connection(self, data: ConnectionData) -> Connection:
        if data.provider_id != self._provider_id:
            raise ValueError(
                f"Connection data for {data.provider_id} given to {self._provider_id} factory"
            )
        return Connection.create(data)


class AuthenticationServiceBase(ABC):
    """Common plumbing of a provider capability.

    Subclasses only need to implement obtain_external_identity().
    """

    config_class: ClassVar[type[ProviderSettings]] = ProviderSettings

    def __init__(
        self,
        provider_id: str,
        config: ProviderSettings | None = None,
        connection_factory: ConnectionFactory | None = None,
    ) -> None:
        self._provider_id = provider_id
        self._config = config if config is not None else self.config_class()
        self._connection_factory = connection_factory or DefaultConnectionFactory(provider_id)

    @property
    def provider_id(self) -> str:
        return self._provider_id

    @property
    def connection_cardinality(self) -> ConnectionCardinality:
        return self._config.cardinality

    @property
    def connection_factory(self) -> ConnectionFactory:
        return self._connection_factory

    def build_connection(self, data: ConnectionData) -> Connection:
        return self._connection_factory.create_connection(data)

    def connection_added_redirect_url(self, request: Request, connection: Connection) -> str:
        return self._config.connection_added_redirect_url or ""

    @abstractmethod
    async def obtain_external_identity(self, request: Request) -> ConnectionData | None: ...


class RedirectSettings(ProviderSettings):
    """Settings of providers that authenticate through a browser redirect."""

    callback_url: str | None = None  # Defaults to the URL of the initiating request


class RedirectingAuthenticationService(AuthenticationServiceBase):
    """Two-leg browser redirect flow (authorization code style).

    Leg one (no ``code`` parameter): remember a random ``state`` in the session
    and send the browser to get_authorization_url(). Leg two (the provider's
    callback to the same URL): check ``state`` and hand the code to
    exchange_code(). Both legs are separate requests; only the session links them.
    """

    config_class: ClassVar[type[ProviderSettings]] = RedirectSettings

    @property
    def state_session_key(self) -> str:
        return f"socialauth.state.{self.provider_id}"

    @abstractmethod
    def get_authorization_url(self, state: str, redirect_uri: str) -> str:
        """Generate the provider URL the browser is sent to.

        Args:
            state: CSRF protection token, stored in the session
            redirect_uri: Where the provider should redirect after auth
        """
        ...

    @abstractmethod
    async def exchange_code(self, code: str, redirect_uri: str) -> ConnectionData | None:
        """Exchange the callback's authorization code for the external identity.

        Raises:
            ExternalServiceError: If the provider request fails
        """
        ...

    def callback_url(self, request: Request) -> str:
        configured = getattr(self._config, "callback_url", None)
        if configured:
            return configured
        return str(request.url.replace(query="", fragment=""))

    async def obtain_external_identity(self, request: Request) -> ConnectionData | None:
        params = request.query_params
        session = request.scope.get("session")

        error = params.get("error")
        if error:
            if session is not None:
                session.pop(self.state_session_key, None)
            raise ProviderAuthDeniedError(
                f"{self.provider_id}: {params.get('error_description') or error}"
            )

        code = params.get("code")
        if not code:
            if session is None:
                raise SessionUnavailableError(
                    f"{self.provider_id}: a session is required to start authentication"
                )
            state = secrets.token_urlsafe(32)
            session[self.state_session_key] = state
            raise SocialAuthenticationRedirect(
                self.get_authorization_url(state=state, redirect_uri=self.callback_url(request))
            )

        expected = session.pop(self.state_session_key, None) if session is not None else None
        received = params.get("state") or ""
        if not expected or not hmac.compare_digest(expected, received):
            logger.warning("OAuth state missing or mismatched: provider=%s", self.provider_id)
            raise ProviderAuthDeniedError(
                f"{self.provider_id}: invalid state parameter", code="oauth_state_invalid"
            )

        return await self.exchange_code(code, self.callback_url(request))
