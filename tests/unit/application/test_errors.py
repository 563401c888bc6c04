"""Tests for mapping socialauth errors to HTTP status codes."""

import json

import pytest
from starlette.requests import Request

from socialauth.application.api.v1.errors import (
    map_error,
    social_auth_error_handler,
    status_code_for,
)
from socialauth.domain.shared.error import ConfigurationError, StorageUnavailableError
from socialauth.domain.social.error import (
    AmbiguousAccountError,
    AuthenticationError,
    DuplicateConnectionError,
    ProviderAuthDeniedError,
    SessionUnavailableError,
    UnknownProviderError,
)


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (UnknownProviderError("x"), 404),
        (DuplicateConnectionError("x"), 409),
        (AmbiguousAccountError("x"), 409),
        (SessionUnavailableError("x"), 409),
        (ProviderAuthDeniedError("x"), 403),
        (AuthenticationError("x"), 401),
        (StorageUnavailableError("x"), 503),
        (ConfigurationError("x"), 503),
    ],
)
def test_status_codes(error, status_code):
    assert status_code_for(error) == status_code


def test_map_error_keeps_code_and_message():
    exc = map_error(DuplicateConnectionError("already connected"))

    assert exc.status_code == 409
    assert exc.detail == {"code": "duplicate_connection", "message": "already connected"}


@pytest.mark.asyncio
async def test_handler_renders_code_and_message():
    request = Request({"type": "http", "method": "GET", "path": "/auth/x", "headers": []})

    response = await social_auth_error_handler(request, StorageUnavailableError("db down"))

    assert response.status_code == 503
    assert json.loads(response.body) == {
        "detail": {"code": StorageUnavailableError("db down").code, "message": "db down"}
    }
