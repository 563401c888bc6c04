"""Social sign-in infrastructure adapters."""

from socialauth.infrastructure.social.di import SocialInfraProvider

__all__ = ["SocialInfraProvider"]
