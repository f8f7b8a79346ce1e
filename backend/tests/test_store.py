from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from models.session import Session
from protocol.base import ProtocolHandler
from store import InMemorySessionStore, SessionExistsError


def _session(session_id: str) -> Session:
    return Session(session_id=session_id, handler=MagicMock(spec=ProtocolHandler))


class TestInMemorySessionStore:

    def setup_method(self):
        self.store = InMemorySessionStore()

    def test_starts_empty(self):
        assert len(self.store) == 0
        assert self.store.get("abc") is None
        assert "abc" not in self.store

    def test_add_and_get(self):
        session = _session("abc")
        self.store.add(session)

        assert self.store.get("abc") is session
        assert "abc" in self.store
        assert len(self.store) == 1

    def test_duplicate_ids_are_refused(self):
        self.store.add(_session("abc"))
        with pytest.raises(SessionExistsError):
            self.store.add(_session("abc"))
        assert len(self.store) == 1

    def test_remove_is_single_shot(self):
        session = _session("abc")
        self.store.add(session)

        assert self.store.remove("abc") is session
        assert self.store.remove("abc") is None
        assert "abc" not in self.store

    def test_values_is_a_snapshot(self):
        self.store.add(_session("a"))
        self.store.add(_session("b"))

        for session in self.store.values():
            self.store.remove(session.session_id)

        assert len(self.store) == 0

    def test_non_string_keys_are_never_members(self):
        assert None not in self.store


class TestSessionModel:

    def test_created_at_is_set(self):
        assert _session("abc").created_at is not None

    def test_session_id_is_immutable(self):
        session = _session("abc")
        with pytest.raises(ValidationError):
            session.session_id = "other"
