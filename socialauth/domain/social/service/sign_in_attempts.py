"""Session-scoped record of sign-in attempts awaiting a local account.

A user who signs in with an external account that no local user is connected
to is sent off to sign up. Provider round trips are separate HTTP requests, so
the attempt is kept in the browser session until signup completes and connects
it to the new account.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import MutableMapping
from typing import Any

from socialauth.domain.social.model.value import ConnectionData, ConnectionKey

logger = logging.getLogger(__name__)

SIGN_IN_ATTEMPTS_KEY = "socialauth.sign_in_attempts"
"""Session attribute holding the pending attempts. Access it only through SignInAttemptStore."""

Session = MutableMapping[str, Any]


class SignInAttemptStore:
    """Ordered, deduplicated pending attempts attached to a session.

    Attempts are stored as a JSON list so cookie-backed sessions can carry them.
    Writes never mutate a stored list in place: each one assigns a new list, under
    a lock, so concurrent requests sharing a session never lose an update and
    readers only ever see complete snapshots.
    """

    def __init__(self, session_key: str = SIGN_IN_ATTEMPTS_KEY) -> None:
        self._session_key = session_key
        self._lock = threading.RLock()

    def add(self, session: Session | None, data: ConnectionData | None) -> bool:
        """Record an attempt.

        Returns:
            True if an attempt with the same key was already pending (nothing is
            stored), False if the attempt was recorded or there was nothing to record.
        """
        if session is None or data is None:
            return False

        with self._lock:
            attempts = self._load(session)
            if any(existing.key == data.key for existing in attempts):
                logger.debug("Sign-in attempt already pending: %s", data.key)
                return True
            self._store(session, [*attempts, data])

        logger.debug("Sign-in attempt recorded: %s", data.key)
        return False

    def remove(self, session: Session | None, key: ConnectionKey) -> bool:
        """Drop the attempt with the given key. Returns whether one was dropped."""
        if session is None:
            return False

        with self._lock:
            attempts = self._load(session)
            remaining = [a for a in attempts if a.key != key]
            if len(remaining) == len(attempts):
                return False
            self._store(session, remaining)
        return True

    def clear(self, session: Session | None) -> None:
        """Forget all pending attempts of the session."""
        if session is None:
            return
        with self._lock:
            session.pop(self._session_key, None)

    def list(self, session: Session | None) -> list[ConnectionData]:
        """Snapshot of pending attempts in the order they were recorded."""
        if session is None:
            return []
        with self._lock:
            return self._load(session)

    def _load(self, session: Session) -> list[ConnectionData]:
        raw = session.get(self._session_key) or []
        return [ConnectionData.model_validate(item) for item in raw]

    def _store(self, session: Session, attempts: list[ConnectionData]) -> None:
        if attempts:
            session[self._session_key] = [a.model_dump(mode="json") for a in attempts]
        else:
            session.pop(self._session_key, None)
