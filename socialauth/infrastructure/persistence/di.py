import logging
from typing import AsyncIterable

from dishka import Provider, Scope, provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from socialauth.config import Config
from socialauth.domain.social.port.repository import UsersConnectionRepository
from socialauth.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from socialauth.infrastructure.persistence.repository.connection import (
    SqlUsersConnectionRepository,
)

logger = logging.getLogger(__name__)


class PersistenceProvider(Provider):
    # Factories require method syntax
    @provide(scope=Scope.APP)
    async def get_engine(self, config: Config) -> AsyncIterable[AsyncEngine]:
        engine = create_db_engine(config.database)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterable[AsyncSession]:
        """One session per request, committed when the request scope closes."""
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                logger.warning("Rolling back session after failed request")
                await session.rollback()
                raise

    users_connection_repo = provide(
        SqlUsersConnectionRepository,
        scope=Scope.REQUEST,
        provides=UsersConnectionRepository,
    )
