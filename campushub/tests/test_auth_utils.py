import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from campushub.auth_service.credentials import CredentialService
from campushub.auth_service.guard import AccessGuard, Anonymous, Authenticated, Role
from campushub.auth_service.utils import optional_principal, verify_token_from_request
from campushub.errors import Forbidden, InvalidCredential, Unauthenticated


@pytest.fixture
def credentials():
    return CredentialService("test_secret", expiration_minutes=60)


@pytest.fixture
def guard(credentials, store):
    return AccessGuard(credentials, store)


def test_create_token(credentials):
    account_id = uuid.uuid4()
    token = credentials.create_token(account_id, "o123@rguktong.ac.in")

    assert isinstance(token, str)

    payload = jwt.decode(token, "test_secret", algorithms=["HS256"])
    assert payload["id"] == str(account_id)
    assert payload["email"] == "o123@rguktong.ac.in"
    assert "exp" in payload
    assert "iat" in payload


def test_decode_token_round_trip(credentials):
    account_id = uuid.uuid4()
    payload = credentials.decode_token(credentials.create_token(account_id, "a@rguktong.ac.in"))
    assert payload["id"] == str(account_id)


def test_decode_token_expired(credentials):
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    token = jwt.encode({"id": "x", "email": "e", "iat": past, "exp": past + timedelta(minutes=1)},
                       "test_secret", algorithm="HS256")
    with pytest.raises(InvalidCredential) as excinfo:
        credentials.decode_token(token)
    assert excinfo.value.msg == "Token expired"
    assert excinfo.value.status_code == 400


def test_decode_token_wrong_secret(credentials):
    token = CredentialService("another_secret").create_token(uuid.uuid4(), "a@rguktong.ac.in")
    with pytest.raises(InvalidCredential):
        credentials.decode_token(token)


def test_decode_token_without_id(credentials):
    token = jwt.encode({"email": "a@rguktong.ac.in"}, "test_secret", algorithm="HS256")
    with pytest.raises(InvalidCredential):
        credentials.decode_token(token)


def test_password_hashing(credentials):
    password_hash = credentials.hash_password("secret1")
    assert password_hash != "secret1"
    assert credentials.verify_password(password_hash, "secret1") is True
    assert credentials.verify_password(password_hash, "secret2") is False
    assert credentials.verify_password("not-a-hash", "secret1") is False


def test_missing_secret_is_rejected():
    with pytest.raises(RuntimeError):
        CredentialService("")


# --- GUARD ---
@pytest.mark.parametrize("header", [None, "", "   "])
def test_classify_anonymous(guard, header):
    assert guard.classify(header) == Anonymous()


@pytest.mark.parametrize("header", ["InvalidFormat", "Bearer", "Bearer   ", "Basic abc", "Bearer not.a.jwt"])
def test_classify_invalid(guard, header):
    with pytest.raises(InvalidCredential):
        guard.classify(header)


def test_classify_rejects_non_uuid_id(guard):
    token = jwt.encode({"id": "123", "email": "a@b.c"}, "test_secret", algorithm="HS256")
    with pytest.raises(InvalidCredential):
        guard.classify(f"Bearer {token}")


def test_classify_authenticated(guard, credentials):
    account_id = uuid.uuid4()
    principal = guard.classify(f"Bearer {credentials.create_token(account_id, 'a@rguktong.ac.in')}")
    assert principal == Authenticated(account_id=account_id, email="a@rguktong.ac.in")


def test_require_anonymous(guard):
    with pytest.raises(Unauthenticated):
        guard.require(Anonymous())


def test_require_any_authenticated(guard):
    principal = Authenticated(uuid.uuid4())
    assert guard.require(principal) is principal


def test_require_admin(guard, store):
    admin = store.insert_account("admin", "dean", "dean@rguktong.ac.in", "hash")
    user = store.insert_account("user", "o123", "o123@rguktong.ac.in", "hash")

    assert guard.require(Authenticated(admin["id"]), Role.ADMIN).account_id == admin["id"]

    with pytest.raises(Forbidden):
        guard.require(Authenticated(user["id"]), Role.ADMIN)

    # Admin removed after the token was issued
    store.delete_account("admin", admin["id"])
    with pytest.raises(Forbidden):
        guard.require(Authenticated(admin["id"]), Role.ADMIN)


def test_require_organizer_role(guard, store):
    user = store.insert_account("user", "o123", "o123@rguktong.ac.in", "hash")
    with pytest.raises(Forbidden):
        guard.require(Authenticated(user["id"]), Role.ORGANIZER)

    store.users[user["id"]]["role"] = "organizer"
    assert guard.require(Authenticated(user["id"]), Role.ORGANIZER)


# --- FLASK HELPERS ---
def test_verify_token_from_request_valid(app, services, store):
    user = store.insert_account("user", "o123", "o123@rguktong.ac.in", "hash")
    token = services.credentials.create_token(user["id"], user["email"])

    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        principal, err, code = verify_token_from_request()
        assert principal.account_id == user["id"]
        assert err is None
        assert code is None


def test_verify_token_from_request_missing_header(app):
    with app.test_request_context():
        principal, err, code = verify_token_from_request()
        assert principal is None
        assert code == 401
        assert err.json == {"success": False, "msg": "Access denied"}


def test_verify_token_from_request_wrong_role(app, services, store):
    user = store.insert_account("user", "o123", "o123@rguktong.ac.in", "hash")
    token = services.credentials.create_token(user["id"], user["email"])

    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        principal, err, code = verify_token_from_request(Role.ADMIN)
        assert principal is None
        assert code == 403


def test_optional_principal_tolerates_bad_token(app):
    with app.test_request_context(headers={"Authorization": "Bearer garbage"}):
        assert optional_principal() == Anonymous()
