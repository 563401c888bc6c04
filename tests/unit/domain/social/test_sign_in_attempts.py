"""Unit tests for SignInAttemptStore."""

import json
import threading
from datetime import UTC, datetime

from socialauth.domain.social.model.value import ConnectionData, ConnectionKey
from socialauth.domain.social.service.sign_in_attempts import (
    SIGN_IN_ATTEMPTS_KEY,
    SignInAttemptStore,
)


def make_data(
    provider_id: str = "providerA", provider_user_id: str = "a", **kwargs
) -> ConnectionData:
    return ConnectionData(provider_id=provider_id, provider_user_id=provider_user_id, **kwargs)


class TestSignInAttemptStoreAdd:
    """Tests for SignInAttemptStore.add."""

    def test_add_then_duplicate_then_distinct_keys(self):
        """Same key is deduplicated; differing provider or user id is a new attempt."""
        store = SignInAttemptStore()
        session: dict = {}

        assert store.add(session, make_data("providerA", "a")) is False
        assert store.add(session, make_data("providerA", "a")) is True
        assert store.add(session, make_data("providerA", "b")) is False
        assert store.add(session, make_data("providerB", "a")) is False

        assert [a.key for a in store.list(session)] == [
            ConnectionKey("providerA", "a"),
            ConnectionKey("providerA", "b"),
            ConnectionKey("providerB", "a"),
        ]

    def test_duplicate_keeps_first_recorded_data(self):
        """A second attempt for the same account doesn't overwrite the first one."""
        store = SignInAttemptStore()
        session: dict = {}

        store.add(session, make_data(display_name="First"))
        store.add(session, make_data(display_name="Second"))

        [attempt] = store.list(session)
        assert attempt.display_name == "First"

    def test_no_session_is_a_noop(self):
        store = SignInAttemptStore()

        assert store.add(None, make_data()) is False
        assert store.list(None) == []

    def test_no_data_is_a_noop(self):
        store = SignInAttemptStore()
        session: dict = {}

        assert store.add(session, None) is False
        assert session == {}

    def test_attempts_are_json_serialisable(self):
        """Cookie sessions must be able to carry the pending attempts."""
        store = SignInAttemptStore()
        session: dict = {}

        store.add(
            session,
            make_data(access_token="tok", expire_time=datetime(2030, 1, 1, tzinfo=UTC)),
        )

        restored = json.loads(json.dumps(session))
        [attempt] = store.list(restored)
        assert attempt.access_token == "tok"
        assert attempt.expire_time == datetime(2030, 1, 1, tzinfo=UTC)

    def test_uses_well_known_session_key(self):
        store = SignInAttemptStore()
        session: dict = {}

        store.add(session, make_data())

        assert list(session) == [SIGN_IN_ATTEMPTS_KEY]


class TestSignInAttemptStoreRemove:
    """Tests for SignInAttemptStore.remove and clear."""

    def test_remove_and_clear(self):
        store = SignInAttemptStore()
        session: dict = {}
        for provider_id, user_id in [("providerA", "a"), ("providerA", "b"), ("providerB", "a")]:
            store.add(session, make_data(provider_id, user_id))

        assert store.remove(session, ConnectionKey("providerA", "a")) is True
        assert len(store.list(session)) == 2

        store.clear(session)
        assert store.list(session) == []
        assert SIGN_IN_ATTEMPTS_KEY not in session

    def test_remove_unknown_key_returns_false(self):
        store = SignInAttemptStore()
        session: dict = {}
        store.add(session, make_data())

        assert store.remove(session, ConnectionKey("providerA", "zzz")) is False
        assert len(store.list(session)) == 1

    def test_remove_without_session(self):
        assert SignInAttemptStore().remove(None, ConnectionKey("providerA", "a")) is False

    def test_removing_last_attempt_drops_session_key(self):
        store = SignInAttemptStore()
        session: dict = {}
        store.add(session, make_data())

        store.remove(session, ConnectionKey("providerA", "a"))

        assert SIGN_IN_ATTEMPTS_KEY not in session

    def test_clear_without_session(self):
        SignInAttemptStore().clear(None)


class TestSignInAttemptStoreSnapshots:
    """Readers never see or mutate the stored list."""

    def test_list_is_a_snapshot(self):
        store = SignInAttemptStore()
        session: dict = {}
        store.add(session, make_data("providerA", "a"))

        snapshot = store.list(session)
        store.add(session, make_data("providerA", "b"))
        snapshot.clear()

        assert len(store.list(session)) == 2

    def test_writes_replace_the_stored_list(self):
        store = SignInAttemptStore()
        session: dict = {}
        store.add(session, make_data("providerA", "a"))
        before = session[SIGN_IN_ATTEMPTS_KEY]

        store.add(session, make_data("providerA", "b"))

        assert session[SIGN_IN_ATTEMPTS_KEY] is not before
        assert len(before) == 1

    def test_concurrent_adds_to_shared_session(self):
        """Threads sharing one session never lose an attempt or store a duplicate."""
        store = SignInAttemptStore()
        session: dict = {}

        def worker(n: int) -> None:
            for i in range(50):
                store.add(session, make_data("providerA", str(i % 25 + n * 25)))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        keys = [a.key for a in store.list(session)]
        assert len(keys) == 100
        assert len(set(keys)) == 100
