"""Unit tests for SocialAuthenticationManager."""

from unittest.mock import AsyncMock

import pytest

from socialauth.domain.social.error import AuthenticationError
from socialauth.domain.social.model.token import SocialAuthenticationToken
from socialauth.domain.social.model.value import ConnectionData, UserId
from socialauth.domain.social.port.authentication_manager import UserDetails
from socialauth.domain.social.service.authentication import SocialAuthenticationManager


def make_manager(
    connected: set[UserId] | None = None,
    details: UserDetails | None = None,
) -> SocialAuthenticationManager:
    """Create a SocialAuthenticationManager with mocked dependencies."""
    users_repo = AsyncMock()
    users_repo.find_user_ids_connected_to.return_value = connected or set()
    user_details_service = AsyncMock()
    user_details_service.load_user.return_value = details
    return SocialAuthenticationManager(
        _users_connection_repo=users_repo,
        _user_details_service=user_details_service,
    )


def make_token(user_id: str | None = "joe") -> SocialAuthenticationToken:
    data = ConnectionData(provider_id="mock", provider_user_id="12345")
    return SocialAuthenticationToken(
        connection_data=data,
        user_id=UserId(user_id) if user_id is not None else None,
    )


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_returns_principal_with_authorities(self):
        manager = make_manager(
            connected={UserId("joe")},
            details=UserDetails(user_id=UserId("joe"), authorities=frozenset({"ROLE_USER"})),
        )

        principal = await manager.authenticate(make_token())

        assert principal.user_id == UserId("joe")
        assert principal.authorities == frozenset({"ROLE_USER"})
        assert principal.provider_identity == make_token().connection_data.key

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("token", "connected", "details", "code"),
        [
            (make_token(None), set(), None, "unbound_token"),
            (make_token(), {UserId("jane")}, None, "bad_credentials"),
            (make_token(), {UserId("joe")}, None, "user_not_found"),
            (
                make_token(),
                {UserId("joe")},
                UserDetails(user_id=UserId("joe"), authorities=frozenset(), enabled=False),
                "user_disabled",
            ),
        ],
    )
    async def test_rejections(self, token, connected, details, code):
        manager = make_manager(connected=connected, details=details)

        with pytest.raises(AuthenticationError) as exc_info:
            await manager.authenticate(token)

        assert exc_info.value.code == code
