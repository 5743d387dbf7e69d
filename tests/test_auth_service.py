import pytest

from student_dashboard.services import AuthError, InMemoryKeyValueStore, MockAuthService
from student_dashboard.services.auth_service import USERS_KEY


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def auth(kv_store):
    return MockAuthService(kv_store)


def test_register_creates_user_with_hashed_password(auth, kv_store):
    user = auth.register("ada@example.com", "secret123")

    assert user.uid.startswith("user_")
    assert user.display_name == "ada"
    stored = kv_store.get(USERS_KEY)[0]
    assert stored["email"] == "ada@example.com"
    assert stored["passwordHash"] != "secret123"
    assert "password" not in stored


def test_register_rejects_duplicate_email_case_insensitively(auth):
    auth.register("ada@example.com", "secret123")

    with pytest.raises(AuthError) as excinfo:
        auth.register("ADA@example.com", "other-secret")

    assert excinfo.value.code == "auth/email-already-in-use"


def test_authenticate_success_and_failures(auth):
    registered = auth.register("ada@example.com", "secret123")

    assert auth.authenticate("ada@example.com", "secret123") == registered

    with pytest.raises(AuthError) as wrong_password:
        auth.authenticate("ada@example.com", "nope")
    with pytest.raises(AuthError) as unknown_user:
        auth.authenticate("alan@example.com", "secret123")
    with pytest.raises(AuthError) as missing:
        auth.authenticate("", "")

    assert wrong_password.value.code == "auth/wrong-password"
    assert unknown_user.value.code == "auth/user-not-found"
    assert missing.value.code == "auth/invalid-credential"


def test_get_user_by_uid(auth):
    user = auth.register("ada@example.com", "secret123")

    assert auth.get_user(user.uid) == user
    assert auth.get_user("user_missing") is None
    assert user.get_id() == user.uid
