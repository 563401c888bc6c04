from socialauth.domain.social.util.di.provider import SocialProvider

__all__ = ["SocialProvider"]
