"""Repository ports for connection storage."""

from abc import abstractmethod
from typing import Protocol

from socialauth.domain.shared.port import Port
from socialauth.domain.social.model.connection import Connection
from socialauth.domain.social.model.value import UserId


class ConnectionRepository(Port, Protocol):
    """Connections of one local user."""

    @abstractmethod
    async def find_connections(self, provider_id: str | None = None) -> list[Connection]:
        """Get the user's connections, optionally only those to one provider."""
        ...

    @abstractmethod
    async def add_connection(self, connection: Connection) -> None:
        """Store a new connection.

        Raises:
            DuplicateConnectionError: If the user already has a connection with this key
        """
        ...

    @abstractmethod
    async def update_connection(self, connection: Connection) -> None:
        """Replace profile and credential data of an existing connection.

        Raises:
            NotFoundError: If the user has no connection with this key
        """
        ...


class UsersConnectionRepository(Port, Protocol):
    """Connection storage across all local users."""

    @abstractmethod
    async def find_user_ids_connected_to(
        self, provider_id: str, provider_user_ids: set[str]
    ) -> set[UserId]:
        """Get ids of local users connected to any of the given external accounts."""
        ...

    @abstractmethod
    def create_connection_repository(self, user_id: UserId) -> ConnectionRepository:
        """Get the connection repository of a single user."""
        ...
