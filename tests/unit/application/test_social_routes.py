"""End-to-end tests of the social routes on a real app with in-memory SQLite."""

import pytest
from fastapi import Request
from fastapi.testclient import TestClient
from starlette.requests import Request as StarletteRequest

from socialauth.application.api.middleware import store_principal
from socialauth.application.api.rest.app import create_app
from socialauth.config import Config, DatabaseConfig, ProviderConfig, SessionConfig, SocialConfig
from socialauth.domain.social.model.principal import Principal
from socialauth.domain.social.model.value import ConnectionData, UserId
from socialauth.domain.social.service.security_context import SecurityContextBinder
from socialauth.infrastructure.social import di as social_di
from socialauth.sdk.provider import AuthenticationServiceBase


class MockProvider(AuthenticationServiceBase):
    """Hands out the same external account on every request."""

    async def obtain_external_identity(self, request: StarletteRequest) -> ConnectionData | None:
        return ConnectionData(
            provider_id=self.provider_id,
            provider_user_id="12345",
            display_name="Joe",
            access_token="secret-token",
        )


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(social_di, "discover_providers", lambda: {"mock": MockProvider})
    config = Config(
        database=DatabaseConfig(url="sqlite+aiosqlite:///:memory:"),
        session=SessionConfig(secret_key="test-secret"),
        social=SocialConfig(post_login_url="/home", providers=[ProviderConfig(provider="mock")]),
    )
    app = create_app(config, create_schema=True)

    # Stand-ins for the host application's own account pages
    @app.get("/test/login")
    async def login(request: Request, user: str):
        store_principal(request.session, Principal(user_id=UserId(user)))
        return {}

    @app.get("/test/logout")
    async def logout(request: Request):
        store_principal(request.session, None)
        return {}

    @app.get("/test/whoami")
    async def whoami():
        principal = SecurityContextBinder().current()
        return {"user_id": str(principal.user_id) if principal else None}

    with TestClient(app) as test_client:
        yield test_client


class TestSocialRoutes:
    def test_signup_then_sign_in(self, client: TestClient):
        response = client.get("/auth/mock", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/signup"

        pending = client.get("/auth/signup/pending").json()
        assert [(p["provider_id"], p["provider_user_id"]) for p in pending] == [("mock", "12345")]
        assert "access_token" not in pending[0]

        # The host creates the local account and signs its user in
        client.get("/test/login", params={"user": "joe"})
        response = client.post("/auth/signup/complete")
        assert response.status_code == 200
        assert [c["provider_user_id"] for c in response.json()] == ["12345"]
        assert client.get("/auth/signup/pending").json() == []

        client.get("/test/logout")
        assert client.get("/test/whoami").json() == {"user_id": None}

        response = client.get("/auth/mock", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/home"
        assert client.get("/test/whoami").json() == {"user_id": "joe"}

    def test_complete_signup_requires_sign_in(self, client: TestClient):
        response = client.post("/auth/signup/complete")

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "not_authenticated"

    def test_unknown_provider_redirects_to_failure_url(self, client: TestClient):
        response = client.get("/auth/nope", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/signin?error=unknown_provider"

    def test_connect_account_to_signed_in_user(self, client: TestClient):
        client.get("/test/login", params={"user": "jane"})

        response = client.get("/auth/mock/connect", follow_redirects=False)
        assert response.headers["location"] == "/connect"

        # Connecting the same account again is refused, and signs the user out
        response = client.get("/auth/mock/connect", follow_redirects=False)
        assert response.headers["location"] == "/signin?error=duplicate_connection"
        assert client.get("/test/whoami").json() == {"user_id": None}
