"""Authentication token handed to the AuthenticationManager."""

from dataclasses import dataclass

from socialauth.domain.social.model.value import ConnectionData, UserId


@dataclass(frozen=True)
class SocialAuthenticationToken:
    """An external identity together with the local user it was matched to.

    `user_id` is None until the dispatcher has reconciled the identity against
    local accounts.
    """

    connection_data: ConnectionData
    user_id: UserId | None = None

    @property
    def provider_id(self) -> str:
        return self.connection_data.provider_id
