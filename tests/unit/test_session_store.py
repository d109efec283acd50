"""Test session store and its local persistence."""
from medibook.models import Role
from medibook.session import TOKEN_KEY, USER_KEY, SessionStore


USER = {"id": "u1", "name": "Pat Doe", "role": "PATIENT"}


def test_starts_empty(session):
    assert session.get_user() is None
    assert session.get_token() is None
    assert not session.is_authenticated
    assert session.auth_headers() == {}


def test_set_credentials_updates_memory_and_storage(session, storage):
    session.set_credentials(USER, "tok-123")

    assert session.get_token() == "tok-123"
    assert session.get_user().role is Role.PATIENT
    assert session.is_authenticated
    assert storage.get_item(TOKEN_KEY) == "tok-123"
    assert '"Pat Doe"' in storage.get_item(USER_KEY)


def test_auth_headers_carry_bearer_token(session):
    session.set_credentials(USER, "tok-123")
    assert session.auth_headers() == {"Authorization": "Bearer tok-123"}


def test_restore_reads_previous_session(session, storage):
    session.set_credentials(USER, "tok-123")

    restored = SessionStore(storage)
    assert restored.restore() is True
    assert restored.get_user().name == "Pat Doe"
    assert restored.get_token() == "tok-123"


def test_restore_without_data(session):
    assert session.restore() is False
    assert not session.is_authenticated


def test_restore_ignores_corrupt_user(session, storage):
    storage.set_item(TOKEN_KEY, "tok-123")
    storage.set_item(USER_KEY, "{not json")

    assert session.restore() is False
    assert session.get_user() is None


def test_logout_clears_memory_and_storage(session, storage):
    session.set_credentials(USER, "tok-123")
    session.logout()

    assert not session.is_authenticated
    assert storage.get_item(TOKEN_KEY) is None
    assert storage.get_item(USER_KEY) is None


def test_storage_overwrite_and_clear(storage):
    storage.set_item("k", "v1")
    storage.set_item("k", "v2")
    storage.set_item("other", "x")

    assert storage.get_item("k") == "v2"
    assert storage.clear() == 2
    assert storage.get_item("k") is None
