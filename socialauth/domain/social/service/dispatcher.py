"""Request-level orchestration of social sign-in and account connection."""

import logging
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import logfire
from starlette.requests import Request

from socialauth.config import SocialConfig
from socialauth.domain.shared.error import SocialAuthError
from socialauth.domain.shared.service import Service
from socialauth.domain.social.error import (
    ProviderAuthDeniedError,
    SessionUnavailableError,
    SocialAuthenticationRedirect,
    UnknownProviderError,
)
from socialauth.domain.social.model.outcome import AuthState, DispatchOutcome
from socialauth.domain.social.model.principal import Principal
from socialauth.domain.social.model.token import SocialAuthenticationToken
from socialauth.domain.social.model.value import ConnectionData
from socialauth.domain.social.port.authentication_manager import AuthenticationManager
from socialauth.domain.social.port.authentication_service import SocialAuthenticationService
from socialauth.domain.social.port.provider_registry import ProviderRegistry
from socialauth.domain.social.service.reconciler import ConnectionReconciler
from socialauth.domain.social.service.security_context import SecurityContextBinder
from socialauth.domain.social.service.sign_in_attempts import SignInAttemptStore

logger = logging.getLogger(__name__)

INTERNAL_ERROR_CODE = "internal_error"


@dataclass(frozen=True)
class RouteMatch:
    """A request path resolved against the dispatcher's base path."""

    provider_id: str
    connect: bool = False


class AuthenticationDispatcher(Service):
    """Routes social sign-in requests to providers and drives the sign-in state machine.

    - {base_path}/{provider_id}: sign in with the provider's account, or record a
      pending sign-in attempt and send the user to signup if no local user is
      connected to it yet
    - {base_path}/{provider_id}/{connect_segment}: connect the provider's account
      to the signed-in user

    Holds no per-request state; one instance may serve concurrent requests.
    """

    _config: SocialConfig
    _registry: ProviderRegistry
    _reconciler: ConnectionReconciler
    _attempts: SignInAttemptStore
    _authentication_manager: AuthenticationManager
    _security_context: SecurityContextBinder

    def parse_route(self, path: str) -> RouteMatch | None:
        """Extract the provider id (and connect flag) from a request path."""
        base = self._config.base_path
        if base and path != base and not path.startswith(base + "/"):
            return None

        rest = path[len(base) :].strip("/")
        segments = rest.split("/") if rest else []
        if len(segments) == 1:
            return RouteMatch(provider_id=segments[0])
        if len(segments) == 2 and segments[1] == self._config.connect_segment:
            return RouteMatch(provider_id=segments[0], connect=True)
        return None

    async def dispatch(self, request: Request) -> DispatchOutcome:
        """Run the sign-in state machine for one request.

        Never raises for sign-in failures: every error ends in a FAILED outcome
        that redirects to the failure URL, with the security context cleared.
        """
        route = self.parse_route(request.url.path)
        provider_id = route.provider_id if route else None

        with logfire.span("SocialAuthentication {provider_id}", provider_id=provider_id) as span:
            outcome = await self._run(request, route, provider_id)
            span.set_attribute("state", outcome.state.value)
            return outcome

    async def _run(
        self,
        request: Request,
        route: RouteMatch | None,
        provider_id: str | None,
    ) -> DispatchOutcome:
        _enter(AuthState.START, provider_id)
        try:
            if route is None:
                raise UnknownProviderError(f"No provider in request path: {request.url.path}")
            service = self._registry.resolve(route.provider_id)
            _enter(AuthState.ROUTED, provider_id)

            principal = self._security_context.current()
            if route.connect and principal is not None:
                _enter(AuthState.CONNECTING, provider_id)
                return await self._connect(request, service, principal)
            return await self._login(request, service)

        except SocialAuthenticationRedirect as redirect:
            logger.info("Redirecting to provider for authentication: provider=%s", provider_id)
            return DispatchOutcome(
                state=AuthState.LOGIN_PENDING,
                redirect_url=redirect.url,
                provider_id=provider_id,
            )
        except Exception as e:
            return self._fail(e, provider_id)

    async def _connect(
        self,
        request: Request,
        service: SocialAuthenticationService,
        principal: Principal,
    ) -> DispatchOutcome:
        data = await self._obtain_external_identity(request, service)
        connection = await self._reconciler.add_connection(service, principal.user_id, data)

        return DispatchOutcome(
            state=AuthState.AUTHENTICATED,
            redirect_url=service.connection_added_redirect_url(request, connection)
            or self._config.connection_added_redirect_url,
            provider_id=service.provider_id,
            principal=principal,
            connection=connection,
        )

    async def _login(
        self,
        request: Request,
        service: SocialAuthenticationService,
    ) -> DispatchOutcome:
        data = await self._obtain_external_identity(request, service)
        _enter(AuthState.LOGIN_CALLBACK, service.provider_id)
        user_id = await self._reconciler.resolve_local_user(service, data)

        if user_id is None:
            session = request.scope.get("session")
            if session is None:
                raise SessionUnavailableError(
                    "Cannot record sign-in attempt: request has no session",
                )
            already_pending = self._attempts.add(session, data)
            logger.info(
                "No local user for %s account %s, signup required (already_pending=%s)",
                data.provider_id,
                data.provider_user_id,
                already_pending,
            )
            return DispatchOutcome(
                state=AuthState.SIGNUP_PENDING,
                redirect_url=self._config.signup_url,
                provider_id=service.provider_id,
            )

        token = SocialAuthenticationToken(connection_data=data, user_id=user_id)
        principal = await self._authentication_manager.authenticate(token)

        if self._config.update_connections:
            await self._reconciler.update_connection(service, user_id, data)

        self._security_context.bind(principal)
        logger.info(
            "User authenticated: user_id=%s, provider=%s, provider_user_id=%s",
            principal.user_id,
            data.provider_id,
            data.provider_user_id,
        )
        return DispatchOutcome(
            state=AuthState.AUTHENTICATED,
            redirect_url=self._config.post_login_url,
            provider_id=service.provider_id,
            principal=principal,
        )

    async def _obtain_external_identity(
        self,
        request: Request,
        service: SocialAuthenticationService,
    ) -> ConnectionData:
        data = await service.obtain_external_identity(request)
        if data is None:
            raise ProviderAuthDeniedError(
                f"Provider {service.provider_id} returned no identity",
            )
        return data

    def _fail(self, error: Exception, provider_id: str | None) -> DispatchOutcome:
        """The single failure path: clear the security context and redirect."""
        self._security_context.clear()

        if isinstance(error, SocialAuthError):
            logger.warning(
                "Social authentication failed: provider=%s, code=%s, message=%s",
                provider_id,
                error.code,
                error.message,
            )
            code = error.code
        else:
            logger.exception("Social authentication failed: provider=%s", provider_id)
            code = INTERNAL_ERROR_CODE
            error = SocialAuthError(str(error) or type(error).__name__, code=code)

        failure_url = _with_query(self._config.failure_url, {self._config.error_parameter: code})
        return DispatchOutcome(
            state=AuthState.FAILED,
            redirect_url=failure_url,
            provider_id=provider_id,
            error=error,
        )


def _with_query(url: str, params: dict[str, str]) -> str:
    """Add query parameters to a URL, keeping any it already has."""
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


def _enter(state: AuthState, provider_id: str | None) -> None:
    logger.debug("Social authentication state %s: provider=%s", state, provider_id)
