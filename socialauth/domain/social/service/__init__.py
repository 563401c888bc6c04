"""Social domain services."""

from .authentication import SocialAuthenticationManager
from .dispatcher import AuthenticationDispatcher
from .reconciler import ConnectionReconciler
from .security_context import SecurityContextBinder
from .sign_in_attempts import SignInAttemptStore
from .signup import SignupService

__all__ = [
    "AuthenticationDispatcher",
    "ConnectionReconciler",
    "SecurityContextBinder",
    "SignInAttemptStore",
    "SignupService",
    "SocialAuthenticationManager",
]
