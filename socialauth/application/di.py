from dishka import AsyncContainer, Provider, Scope, from_context, make_async_container

from socialauth.config import Config
from socialauth.domain.social.util.di import SocialProvider
from socialauth.infrastructure.persistence import PersistenceProvider
from socialauth.infrastructure.social import SocialInfraProvider


class ConfigProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)


def create_container(config: Config | None = None) -> AsyncContainer:
    if config is None:
        config = Config()

    return make_async_container(
        ConfigProvider(),
        PersistenceProvider(),
        SocialInfraProvider(),
        SocialProvider(),
        context={Config: config},
    )
