"""Value objects for the social domain."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from pydantic import RootModel

from socialauth.domain.shared.model.value import ValueModel


class UserId(RootModel[str]):
    """Identifier of a local user account.

    Local users live in the host application; socialauth only ever sees their ids.
    """

    def __str__(self) -> str:
        return self.root

    def __hash__(self) -> int:
        return hash(self.root)


@dataclass(frozen=True)
class ConnectionKey:
    """The durable identity of an external account.

    Two records describe the same external account exactly when their keys are
    equal, whatever their profile data says.
    """

    provider_id: str  # e.g., "github", "orcid"
    provider_user_id: str  # Provider-specific user ID


class ConnectionData(ValueModel):
    """Everything a provider told us about an external account.

    Immutable. Serialises to plain JSON so it can be kept in a cookie session
    while the user finishes signing up.
    """

    provider_id: str
    provider_user_id: str
    display_name: str | None = None
    profile_url: str | None = None
    image_url: str | None = None
    access_token: str | None = None
    secret: str | None = None  # OAuth1-style token secret
    refresh_token: str | None = None
    expire_time: datetime | None = None

    @property
    def key(self) -> ConnectionKey:
        return ConnectionKey(self.provider_id, self.provider_user_id)


class ConnectionCardinality(StrEnum):
    """Whether one external account may be connected to several local users."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"

    @property
    def is_multi_user_id(self) -> bool:
        return self is ConnectionCardinality.ONE_TO_MANY
