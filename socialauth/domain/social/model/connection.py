"""Connection value for the social domain.

Links a local user to an external account. The owning user is tracked by the
ConnectionRepository the connection is stored in, not by the connection itself.
"""

from datetime import UTC, datetime

from pydantic import Field

from socialauth.domain.shared.model.value import ValueModel
from socialauth.domain.social.model.value import ConnectionData, ConnectionKey


class Connection(ValueModel):
    """A persisted (or about to be persisted) link to an external account.

    Invariants:
    - created by a ConnectionFactory, never mutated afterwards
    - `key` is unique per owning user
    """

    data: ConnectionData
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def key(self) -> ConnectionKey:
        return self.data.key

    @property
    def display_name(self) -> str | None:
        return self.data.display_name

    @classmethod
    def create(cls, data: ConnectionData) -> "Connection":
        """Create a new connection from provider data."""
        return cls(data=data)
