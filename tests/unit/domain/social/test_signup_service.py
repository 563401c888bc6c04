"""Unit tests for SignupService."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from socialauth.domain.social.error import DuplicateConnectionError
from socialauth.domain.social.model.connection import Connection
from socialauth.domain.social.model.value import ConnectionData, UserId
from socialauth.domain.social.service.signup import SignupService
from socialauth.domain.social.service.sign_in_attempts import SignInAttemptStore
from socialauth.infrastructure.social.provider_registry import InMemoryProviderRegistry


def make_data(provider_id: str, provider_user_id: str) -> ConnectionData:
    return ConnectionData(provider_id=provider_id, provider_user_id=provider_user_id)


def make_signup_service(reconciler: MagicMock, *provider_ids: str) -> SignupService:
    registry = InMemoryProviderRegistry({pid: MagicMock(provider_id=pid) for pid in provider_ids})
    return SignupService(
        _registry=registry,
        _reconciler=reconciler,
        _attempts=SignInAttemptStore(),
    )


class TestCompleteSignup:
    @pytest.mark.asyncio
    async def test_connects_all_pending_attempts(self):
        reconciler = MagicMock()
        reconciler.add_connection = AsyncMock(side_effect=lambda s, u, d: Connection.create(d))
        service = make_signup_service(reconciler, "github", "orcid")
        session: dict = {}
        store = SignInAttemptStore()
        store.add(session, make_data("github", "1"))
        store.add(session, make_data("orcid", "2"))

        connections = await service.complete(session, UserId("joe"))

        assert [c.key.provider_id for c in connections] == ["github", "orcid"]
        assert service.pending(session) == []
        assert reconciler.add_connection.await_count == 2

    @pytest.mark.asyncio
    async def test_skips_duplicates_and_unregistered_providers(self):
        reconciler = MagicMock()
        reconciler.add_connection = AsyncMock(side_effect=DuplicateConnectionError("taken"))
        service = make_signup_service(reconciler, "github")
        session: dict = {}
        store = SignInAttemptStore()
        store.add(session, make_data("github", "1"))
        store.add(session, make_data("gone", "2"))

        connections = await service.complete(session, UserId("joe"))

        assert connections == []
        assert service.pending(session) == []
        reconciler.add_connection.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_errors_keep_remaining_attempts(self):
        reconciler = MagicMock()
        reconciler.add_connection = AsyncMock(side_effect=RuntimeError("database down"))
        service = make_signup_service(reconciler, "github")
        session: dict = {}
        SignInAttemptStore().add(session, make_data("github", "1"))

        with pytest.raises(RuntimeError):
            await service.complete(session, UserId("joe"))

        assert len(service.pending(session)) == 1

    @pytest.mark.asyncio
    async def test_without_session(self):
        service = make_signup_service(MagicMock(), "github")

        assert await service.complete(None, UserId("joe")) == []
        assert service.pending(None) == []
