"""Tests for SecurityContextMiddleware."""

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from socialauth.application.api.middleware import (
    PRINCIPAL_SESSION_KEY,
    SecurityContextMiddleware,
    load_principal,
    store_principal,
)
from socialauth.domain.social.model.principal import Principal
from socialauth.domain.social.model.value import ConnectionKey, UserId
from socialauth.domain.social.service.security_context import SecurityContextBinder

binder = SecurityContextBinder()


async def whoami(request: Request) -> JSONResponse:
    principal = binder.current()
    return JSONResponse({"user_id": str(principal.user_id) if principal else None})


async def login(request: Request) -> PlainTextResponse:
    store_principal(request.session, Principal(user_id=UserId(request.query_params["user"])))
    return PlainTextResponse("ok")


async def bind_only(request: Request) -> PlainTextResponse:
    binder.bind(Principal(user_id=UserId("leaked")))
    return PlainTextResponse("ok")


def make_client() -> TestClient:
    app = Starlette(
        routes=[
            Route("/whoami", whoami),
            Route("/login", login),
            Route("/bind", bind_only),
        ],
        middleware=[
            Middleware(SessionMiddleware, secret_key="test-secret"),
            Middleware(SecurityContextMiddleware),
        ],
    )
    return TestClient(app)


class TestSecurityContextMiddleware:
    def test_anonymous_request(self):
        with make_client() as client:
            assert client.get("/whoami").json() == {"user_id": None}

    def test_principal_restored_from_session(self):
        with make_client() as client:
            client.get("/login", params={"user": "joe"})

            assert client.get("/whoami").json() == {"user_id": "joe"}

    def test_binding_does_not_outlive_the_request(self):
        with make_client() as client:
            client.get("/bind")

            assert client.get("/whoami").json() == {"user_id": None}


class TestSessionPrincipal:
    def test_store_and_load(self):
        session: dict = {}
        principal = Principal(
            user_id=UserId("joe"),
            authorities=frozenset({"ROLE_USER"}),
            provider_identity=ConnectionKey("mock", "1"),
        )

        store_principal(session, principal)

        assert load_principal(session) == principal

    def test_store_none_signs_out(self):
        session: dict = {}
        store_principal(session, Principal(user_id=UserId("joe")))

        store_principal(session, None)

        assert session == {}

    def test_malformed_principal_is_discarded(self):
        session = {PRINCIPAL_SESSION_KEY: {"authorities": []}}

        assert load_principal(session) is None
        assert session == {}

    def test_no_session(self):
        assert load_principal(None) is None
        store_principal(None, Principal(user_id=UserId("joe")))
