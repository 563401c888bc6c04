from dishka import Provider, Scope, provide

from socialauth.config import Config, SocialConfig
from socialauth.domain.social.port.authentication_manager import AuthenticationManager
from socialauth.domain.social.service import (
    AuthenticationDispatcher,
    ConnectionReconciler,
    SecurityContextBinder,
    SignInAttemptStore,
    SignupService,
    SocialAuthenticationManager,
)


class SocialProvider(Provider):
    @provide(scope=Scope.APP)
    def get_social_config(self, config: Config) -> SocialConfig:
        return config.social

    @provide(scope=Scope.APP)
    def get_sign_in_attempts(self) -> SignInAttemptStore:
        return SignInAttemptStore()

    # Holds no state of its own, the principal lives in a ContextVar
    security_context = provide(SecurityContextBinder, scope=Scope.APP)

    # Request-scoped because they use the request's database session
    reconciler = provide(ConnectionReconciler, scope=Scope.REQUEST)
    authentication_manager = provide(
        SocialAuthenticationManager, scope=Scope.REQUEST, provides=AuthenticationManager
    )
    dispatcher = provide(AuthenticationDispatcher, scope=Scope.REQUEST)
    signup_service = provide(SignupService, scope=Scope.REQUEST)
