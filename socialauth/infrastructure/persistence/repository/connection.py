"""SQL implementation of the connection repositories."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from socialauth.domain.shared.error import NotFoundError, StorageUnavailableError
from socialauth.domain.social.error import DuplicateConnectionError
from socialauth.domain.social.model.connection import Connection
from socialauth.domain.social.model.value import UserId
from socialauth.domain.social.port.repository import (
    ConnectionRepository,
    UsersConnectionRepository,
)
from socialauth.infrastructure.persistence.mappers.connection import (
    connection_data_to_dict,
    connection_to_dict,
    row_to_connection,
)
from socialauth.infrastructure.persistence.tables import user_connections_table

logger = logging.getLogger(__name__)


@contextmanager
def _storage_errors() -> Iterator[None]:
    """Report an unreachable database as StorageUnavailableError."""
    try:
        yield
    except OperationalError as e:
        logger.error("Connection storage unavailable: %s", e)
        raise StorageUnavailableError("Connection storage is unavailable") from e


class SqlConnectionRepository(ConnectionRepository):
    """Connections of one local user, stored in the user_connections table."""

    def __init__(self, session: AsyncSession, user_id: UserId) -> None:
        self.session = session
        self.user_id = user_id

    async def find_connections(self, provider_id: str | None = None) -> list[Connection]:
        t = user_connections_table
        stmt = select(t).where(t.c.user_id == str(self.user_id))
        if provider_id is not None:
            stmt = stmt.where(t.c.provider_id == provider_id)
        stmt = stmt.order_by(t.c.provider_id, t.c.rank)

        with _storage_errors():
            result = await self.session.execute(stmt)
        return [row_to_connection(dict(row)) for row in result.mappings().all()]

    async def add_connection(self, connection: Connection) -> None:
        t = user_connections_table
        key = connection.key
        duplicate = DuplicateConnectionError(
            f"User {self.user_id} is already connected to {key.provider_id} "
            f"account {key.provider_user_id}"
        )

        with _storage_errors():
            existing = await self.session.execute(
                select(t.c.rank).where(
                    t.c.user_id == str(self.user_id),
                    t.c.provider_id == key.provider_id,
                    t.c.provider_user_id == key.provider_user_id,
                )
            )
            if existing.first() is not None:
                raise duplicate

            max_rank = await self.session.scalar(
                select(func.max(t.c.rank)).where(
                    t.c.user_id == str(self.user_id),
                    t.c.provider_id == key.provider_id,
                )
            )
            rank = (max_rank or 0) + 1

            try:
                await self.session.execute(
                    insert(t).values(**connection_to_dict(self.user_id, connection, rank))
                )
                await self.session.flush()
            except IntegrityError as e:
                # Lost a race with a concurrent insert of the same key or rank
                raise duplicate from e

        logger.debug("Stored connection: user_id=%s, key=%s, rank=%d", self.user_id, key, rank)

    async def update_connection(self, connection: Connection) -> None:
        t = user_connections_table
        key = connection.key
        stmt = (
            update(t)
            .where(
                t.c.user_id == str(self.user_id),
                t.c.provider_id == key.provider_id,
                t.c.provider_user_id == key.provider_user_id,
            )
            .values(**connection_data_to_dict(connection.data))
        )
        with _storage_errors():
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError(
                    f"User {self.user_id} has no connection to {key.provider_id} "
                    f"account {key.provider_user_id}"
                )
            await self.session.flush()


class SqlUsersConnectionRepository(UsersConnectionRepository):
    """Connection lookups across all local users."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_user_ids_connected_to(
        self, provider_id: str, provider_user_ids: set[str]
    ) -> set[UserId]:
        if not provider_user_ids:
            return set()

        t = user_connections_table
        stmt = (
            select(t.c.user_id)
            .where(
                t.c.provider_id == provider_id,
                t.c.provider_user_id.in_(sorted(provider_user_ids)),
            )
            .distinct()
        )
        with _storage_errors():
            result = await self.session.execute(stmt)
        return {UserId(user_id) for user_id in result.scalars().all()}

    def create_connection_repository(self, user_id: UserId) -> ConnectionRepository:
        return SqlConnectionRepository(self.session, user_id)
