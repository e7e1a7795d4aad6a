import pytest

from conftest import create_identity
from marketplace.core.errors import AuthError, ConflictError, ValidationError
from marketplace.core.roles import Role
from marketplace.core.security import decode_access_token, verify_password
from marketplace.models.revoked_token import RevokedToken
from marketplace.models.user import User
from marketplace.services.identity import authenticate_user, issue_token, register_user, revoke_token

SECRET = "identity-test-secret"


def test_register_stores_hash_not_password(db_session):
    user = register_user(db_session, "alice", "pw1", Role.CLIENT)

    assert user.id is not None
    assert user.username == "alice"
    assert user.role == "client"
    assert user.password != "pw1"
    assert verify_password("pw1", user.password)


def test_register_strips_username(db_session):
    user = register_user(db_session, "  alice  ", "pw1", Role.CLIENT)

    assert user.username == "alice"


def test_duplicate_username_is_a_conflict(db_session):
    register_user(db_session, "alice", "pw1", Role.CLIENT)

    with pytest.raises(ConflictError):
        register_user(db_session, "alice", "other", Role.FREELANCER)

    assert db_session.query(User).filter(User.username == "alice").count() == 1


@pytest.mark.parametrize(
    "username,password,role",
    [
        ("", "pw", Role.CLIENT),
        ("   ", "pw", Role.CLIENT),
        ("carol", "", Role.CLIENT),
        ("carol", "pw", "admin"),
    ],
)
def test_register_rejects_invalid_input(db_session, username, password, role):
    with pytest.raises(ValidationError):
        register_user(db_session, username, password, role)


def test_authenticate_returns_user(db_session):
    register_user(db_session, "bob", "pw2", Role.FREELANCER)

    user = authenticate_user(db_session, "bob", "pw2")

    assert user.username == "bob"


def test_wrong_password_and_unknown_user_fail_identically(db_session):
    register_user(db_session, "bob", "pw2", Role.FREELANCER)

    with pytest.raises(AuthError) as wrong_password:
        authenticate_user(db_session, "bob", "nope")
    with pytest.raises(AuthError) as unknown_user:
        authenticate_user(db_session, "nobody", "pw2")

    assert wrong_password.value.detail == unknown_user.value.detail == "Invalid credentials"
    assert wrong_password.value.status_code == unknown_user.value.status_code == 401


def test_issued_token_matches_identity(db_session):
    identity = create_identity(db_session, "alice", Role.CLIENT)
    user = authenticate_user(db_session, "alice", "secret")

    claims = decode_access_token(issue_token(user, SECRET), SECRET)

    assert int(claims["sub"]) == identity.id
    assert claims["username"] == "alice"
    assert claims["role"] == "client"


def test_revoke_token_is_idempotent(db_session):
    register_user(db_session, "alice", "pw1", Role.CLIENT)
    user = authenticate_user(db_session, "alice", "pw1")
    claims = decode_access_token(issue_token(user, SECRET), SECRET)

    revoke_token(db_session, claims)
    revoke_token(db_session, claims)

    assert db_session.query(RevokedToken).filter(RevokedToken.jti == claims["jti"]).count() == 1
