"""
Unit tests for SessionStore (in-memory session storage).
"""
import pytest
from datetime import datetime, timedelta
from panel_server.memory import SessionStore


@pytest.fixture
def store():
    """Provide a fresh SessionStore for each test."""
    return SessionStore()


def test_create_session(store):
    """Test that create_session returns an opaque random token."""
    token = store.create_session()

    assert isinstance(token, str)
    assert len(token) >= 32
    assert store.get(token) is not None
    assert store.create_session() != token


def test_new_session_is_anonymous_by_default(store):
    token = store.create_session()
    assert store.is_authenticated(token) is False


def test_set_and_get(store):
    """set() creates the record on first use and flips the flag afterwards."""
    store.set("abc", True)
    assert store.get("abc").authenticated is True

    store.set("abc", False)
    assert store.get("abc").authenticated is False
    assert len(store) == 1


def test_get_unknown_token(store):
    assert store.get("missing") is None
    assert store.is_authenticated("missing") is False
    assert store.is_authenticated(None) is False
    assert store.is_authenticated("") is False


def test_delete_session(store):
    """Test deleting a session."""
    token = store.create_session(authenticated=True)

    assert store.delete(token) is True
    assert store.get(token) is None
    assert store.is_authenticated(token) is False


def test_delete_nonexistent_session(store):
    """Test deleting a session that doesn't exist."""
    assert store.delete("fake-token") is False


def test_cleanup_expired(store):
    """Test that cleanup_expired removes only idle sessions."""
    stale = store.create_session(authenticated=True)
    fresh = store.create_session(authenticated=True)
    store._sessions[stale].last_active = datetime.utcnow() - timedelta(minutes=45)

    deleted = store.cleanup_expired(timeout_minutes=30)

    assert deleted == 1
    assert store.get(stale) is None
    assert store.get(fresh) is not None


def test_get_refreshes_last_active(store):
    token = store.create_session()
    store._sessions[token].last_active = datetime.utcnow() - timedelta(minutes=45)

    store.get(token)

    assert store.cleanup_expired(timeout_minutes=30) == 0
