"""Social domain models."""

from .connection import Connection
from .outcome import AuthState, DispatchOutcome
from .principal import Principal
from .token import SocialAuthenticationToken
from .value import ConnectionCardinality, ConnectionData, ConnectionKey, UserId

__all__ = [
    "AuthState",
    "Connection",
    "ConnectionCardinality",
    "ConnectionData",
    "ConnectionKey",
    "DispatchOutcome",
    "Principal",
    "SocialAuthenticationToken",
    "UserId",
]
