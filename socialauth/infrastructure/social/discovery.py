"""Provider plugin discovery via entry points."""

from __future__ import annotations

import logging
from importlib.metadata import entry_points
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from socialauth.domain.shared.error import ConfigurationError
from socialauth.sdk.provider import AuthenticationServiceBase, ProviderSettings

if TYPE_CHECKING:
    from socialauth.config import ProviderConfig

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "socialauth.providers"


def discover_providers() -> dict[str, type[AuthenticationServiceBase]]:
    """Discover available provider plugins via entry points.

    Scans the 'socialauth.providers' group. Each entry point should point to a
    subclass of AuthenticationServiceBase; its name becomes the provider id.

    Returns:
        Dict mapping provider ids to their classes.
    """
    providers: dict[str, type[AuthenticationServiceBase]] = {}

    for ep in entry_points(group=ENTRY_POINT_GROUP):
        try:
            cls = ep.load()
            _validate_provider_class(cls, ep.name)
            providers[ep.name] = cls
            logger.debug("Discovered provider: %s -> %s", ep.name, cls.__name__)
        except Exception as e:
            logger.warning("Failed to load provider '%s': %s", ep.name, e)

    return providers


def _validate_provider_class(cls: Any, name: str) -> None:
    """Validate that an entry point resolved to a usable provider class.

    Raises:
        TypeError: If the class can't serve as a provider.
    """
    if not isinstance(cls, type):
        raise TypeError(f"Provider {name} must be a class, got {type(cls).__name__}")
    if not issubclass(cls, AuthenticationServiceBase):
        raise TypeError(f"Provider {name} must subclass AuthenticationServiceBase")
    if not issubclass(cls.config_class, ProviderSettings):
        raise TypeError(f"Provider {name} config_class must subclass ProviderSettings")


def instantiate_providers(
    providers_config: list[ProviderConfig],
    available: dict[str, type[AuthenticationServiceBase]],
) -> dict[str, AuthenticationServiceBase]:
    """Build configured providers, failing fast on bad configuration.

    Raises:
        ConfigurationError: If a provider is unknown, duplicated or misconfigured.
    """
    instances: dict[str, AuthenticationServiceBase] = {}

    for provider_config in providers_config:
        name = provider_config.name

        if name in instances:
            raise ConfigurationError(
                f"Duplicate provider '{name}'. Each provider can only be configured once."
            )
        if name not in available:
            known = ", ".join(sorted(available)) or "(none)"
            raise ConfigurationError(f"Unknown provider '{name}'. Available: {known}")

        cls = available[name]
        try:
            settings = cls.config_class.model_validate(provider_config.config)
        except ValidationError as e:
            raise ConfigurationError(_format_validation_error(name, e)) from e

        instances[name] = cls(provider_id=name, config=settings)

    return instances


def _format_validation_error(name: str, error: ValidationError) -> str:
    lines = [f"Invalid config for provider '{name}':"]
    for err in error.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        lines.append(f"  - {loc}: {err.get('msg', 'Unknown error')}")
    return "\n".join(lines)
