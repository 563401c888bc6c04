"""Connection factory port."""

from abc import abstractmethod
from typing import Protocol

from socialauth.domain.shared.port import Port
from socialauth.domain.social.model.connection import Connection
from socialauth.domain.social.model.value import ConnectionData


class ConnectionFactory(Port, Protocol):
    """Creates connections for a single provider."""

    @property
    @abstractmethod
    def provider_id(self) -> str: ...

    @abstractmethod
    def create_connection(self, data: ConnectionData) -> Connection:
        """Create a connection from provider data."""
        ...
