"""The authenticated local user bound to the current request."""

from dataclasses import dataclass, field
from typing import Any

from socialauth.domain.social.model.value import ConnectionKey, UserId


@dataclass(frozen=True)
class Principal:
    """The authenticated identity of the current requester.

    Immutable after creation. `provider_identity` records which external
    account was used to sign in, when the principal came from a social login.
    """

    user_id: UserId
    authorities: frozenset[str] = field(default_factory=frozenset)
    provider_identity: ConnectionKey | None = None

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities

    def to_session(self) -> dict[str, Any]:
        """Render as JSON-safe data for storage in a session."""
        identity = None
        if self.provider_identity is not None:
            identity = {
                "provider_id": self.provider_identity.provider_id,
                "provider_user_id": self.provider_identity.provider_user_id,
            }
        return {
            "user_id": str(self.user_id),
            "authorities": sorted(self.authorities),
            "provider_identity": identity,
        }

    @classmethod
    def from_session(cls, data: dict[str, Any]) -> "Principal":
        """Inverse of to_session()."""
        identity = data.get("provider_identity")
        return cls(
            user_id=UserId(data["user_id"]),
            authorities=frozenset(data.get("authorities") or ()),
            provider_identity=ConnectionKey(**identity) if identity else None,
        )
