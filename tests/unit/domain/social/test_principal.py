"""Unit tests for Principal session round trips."""

import json

from socialauth.domain.social.model.principal import Principal
from socialauth.domain.social.model.value import ConnectionKey, UserId


class TestPrincipalSession:
    def test_survives_json_session(self):
        principal = Principal(
            user_id=UserId("joe"),
            authorities=frozenset({"ROLE_USER", "ROLE_ADMIN"}),
            provider_identity=ConnectionKey("mock", "12345"),
        )

        data = json.loads(json.dumps(principal.to_session()))

        assert data["authorities"] == ["ROLE_ADMIN", "ROLE_USER"]
        assert Principal.from_session(data) == principal

    def test_without_provider_identity(self):
        principal = Principal(user_id=UserId("joe"))

        restored = Principal.from_session(principal.to_session())

        assert restored.provider_identity is None
        assert restored.authorities == frozenset()
        assert not restored.has_authority("ROLE_USER")
