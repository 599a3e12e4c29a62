"""Test user registration, login and tokens."""
from datetime import datetime, timedelta, UTC

import jwt
import pytest

from salon_booking.api.database_models import User
from salon_booking.auth import (
    create_access_token,
    decode_access_token,
    hash_password,
    login,
    register,
    verify_password,
)
from salon_booking.errors import AuthError, ConflictError, ValidationError

SECRET = "unit-secret"


def test_hash_password_is_salted():
    """Hashing the same password twice should give different hashes."""
    first = hash_password("hunter2")
    second = hash_password("hunter2")

    assert first != second
    assert verify_password("hunter2", first)
    assert verify_password("hunter2", second)
    assert not verify_password("hunter3", first)


def test_register_stores_hash_not_password(db):
    """Registering should persist a bcrypt hash of the password."""
    result = register(db, "jane", "s3cret-pass", SECRET)

    user = db.query(User).filter(User.username == "jane").one()
    assert user.id == result["id"]
    assert user.password_hash != "s3cret-pass"
    assert verify_password("s3cret-pass", user.password_hash)


def test_register_returns_token_with_identity(db):
    """Token from registration should decode to the new user's id and username."""
    result = register(db, "jane", "s3cret-pass", SECRET)

    claims = decode_access_token(result["token"], SECRET)

    assert claims == {"id": result["id"], "username": "jane"}


def test_register_twice_raises_conflict(db):
    """Second registration with the same username should fail."""
    register(db, "jane", "s3cret-pass", SECRET)

    with pytest.raises(ConflictError):
        register(db, "jane", "other-pass", SECRET)


@pytest.mark.parametrize("username,password", [
    (None, "pass"),
    ("jane", None),
    ("", "pass"),
    ("jane", ""),
])
def test_register_requires_username_and_password(db, username, password):
    """Missing credentials should be rejected before touching the store."""
    with pytest.raises(ValidationError) as exc_info:
        register(db, username, password, SECRET)

    assert exc_info.value.missing_fields
    assert db.query(User).count() == 0


def test_register_rejects_password_over_bcrypt_limit(db):
    """Passwords longer than 72 bytes should be refused."""
    with pytest.raises(ValidationError):
        register(db, "jane", "x" * 73, SECRET)


def test_login_with_correct_password_returns_token(db):
    """Login should return a fresh token for the stored user."""
    registered = register(db, "jane", "s3cret-pass", SECRET)

    result = login(db, "jane", "s3cret-pass", SECRET)

    assert result["id"] == registered["id"]
    assert decode_access_token(result["token"], SECRET) == {
        "id": registered["id"],
        "username": "jane",
    }


def test_login_with_wrong_password_raises_auth_error(db):
    """Wrong password should raise AuthError."""
    register(db, "jane", "s3cret-pass", SECRET)

    with pytest.raises(AuthError) as exc_info:
        login(db, "jane", "wrong-pass", SECRET)

    assert "invalid" in str(exc_info.value).lower()


def test_login_unknown_user_raises_same_error(db):
    """Unknown usernames should be indistinguishable from wrong passwords."""
    with pytest.raises(AuthError) as exc_info:
        login(db, "nobody", "whatever", SECRET)

    assert str(exc_info.value) == "Invalid username or password"


def test_token_expires_after_one_hour():
    """Token exp claim should be one hour after iat."""
    token = create_access_token(7, "jane", SECRET)

    payload = jwt.decode(token, SECRET, algorithms=["HS256"])

    assert payload["exp"] - payload["iat"] == 3600


def test_decode_rejects_expired_token():
    """Expired tokens should raise AuthError."""
    issued = datetime.now(UTC) - timedelta(hours=2)
    token = jwt.encode(
        {"id": 7, "username": "jane", "iat": issued, "exp": issued + timedelta(hours=1)},
        SECRET,
        algorithm="HS256"
    )

    with pytest.raises(AuthError) as exc_info:
        decode_access_token(token, SECRET)

    assert "expired" in str(exc_info.value).lower()


def test_decode_rejects_wrong_secret():
    """Tokens signed with another secret should raise AuthError."""
    token = create_access_token(7, "jane", "another-secret")

    with pytest.raises(AuthError):
        decode_access_token(token, SECRET)


def test_decode_rejects_garbage():
    with pytest.raises(AuthError):
        decode_access_token("not-a-token", SECRET)


def test_verify_password_rejects_password_over_bcrypt_limit():
    """Over-long passwords should fail verification instead of raising."""
    stored = hash_password("x" * 72)

    assert not verify_password("x" * 80, stored)


def test_login_with_password_over_bcrypt_limit_raises_auth_error(db):
    register(db, "jane", "s3cret-pass", SECRET)

    with pytest.raises(AuthError) as exc_info:
        login(db, "jane", "x" * 80, SECRET)

    assert str(exc_info.value) == "Invalid username or password"


def test_login_unknown_user_still_checks_a_hash(db, monkeypatch):
    """Unknown usernames should cost a bcrypt check like wrong passwords do."""
    import salon_booking.auth as auth_module

    checked = []
    real_verify = auth_module.verify_password

    def recording_verify(password, password_hash):
        checked.append(password_hash)
        return real_verify(password, password_hash)

    monkeypatch.setattr(auth_module, "verify_password", recording_verify)

    with pytest.raises(AuthError):
        login(db, "nobody", "whatever", SECRET)

    assert len(checked) == 1
    assert checked[0].startswith("$2")
