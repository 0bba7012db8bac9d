"""Token service and password hashing tests."""

import base64
import json
import time

import pytest
from jose import jwt

from core.exceptions import ExpiredTokenError, InvalidSignatureError, MalformedTokenError
from core.security import TokenService, hash_password, verify_password
from schemas.user import Role


def _b64(data: dict) -> str:
    raw = json.dumps(data).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


@pytest.fixture
def service():
    return TokenService("unit-secret", ttl_hours=24)


def test_hash_password_uses_fresh_salt():
    first = hash_password("p4ss", rounds=4)
    second = hash_password("p4ss", rounds=4)

    assert first != second
    assert first != "p4ss"
    assert verify_password("p4ss", first)
    assert verify_password("p4ss", second)
    assert not verify_password("wrong", first)


def test_verify_password_rejects_non_bcrypt_hash():
    assert not verify_password("p4ss", "plain-text-value")


def test_issue_and_verify_round_trip(service):
    token, expires_at = service.issue(7, "tutor", "t@x.com")

    claims = service.verify(token)

    assert claims.user_id == 7
    assert claims.role == Role.TUTOR
    assert claims.email == "t@x.com"
    assert claims.expires_at == expires_at


def test_issue_carries_iat_and_exp(service):
    token, expires_at = service.issue(1, "admin", "a@x.com", ttl_hours=2)

    payload = jwt.get_unverified_claims(token)

    assert payload["exp"] - payload["iat"] == 2 * 3600
    assert payload["exp"] == int(expires_at.timestamp())
    assert payload["sub"] == "1"


def test_verify_rejects_expired_token():
    service = TokenService("unit-secret", ttl_hours=-1)
    token, _ = service.issue(1, "admin", "a@x.com")

    with pytest.raises(ExpiredTokenError):
        service.verify(token)


def test_verify_rejects_foreign_token_with_past_exp(service):
    token = jwt.encode(
        {"user_id": 1, "role": "admin", "exp": int(time.time()) - 5},
        "unit-secret",
        algorithm="HS256",
    )

    with pytest.raises(ExpiredTokenError):
        service.verify(token)


def test_verify_rejects_other_secret(service):
    other = TokenService("another-secret", ttl_hours=24)
    token, _ = other.issue(1, "admin", "a@x.com")

    with pytest.raises(InvalidSignatureError):
        service.verify(token)


def test_verify_rejects_other_hmac_size(service):
    token = jwt.encode(
        {"user_id": 1, "role": "admin", "exp": int(time.time()) + 600},
        "unit-secret",
        algorithm="HS512",
    )

    with pytest.raises(InvalidSignatureError):
        service.verify(token)


def test_verify_rejects_alg_none(service):
    header = _b64({"alg": "none", "typ": "JWT"})
    payload = _b64({"user_id": 1, "role": "admin", "exp": int(time.time()) + 600})

    with pytest.raises(InvalidSignatureError):
        service.verify(f"{header}.{payload}.")


def test_verify_rejects_garbage(service):
    with pytest.raises(MalformedTokenError):
        service.verify("not-a-token")


def test_verify_rejects_missing_subject_claims(service):
    token = jwt.encode(
        {"exp": int(time.time()) + 600, "role": "admin"},
        "unit-secret",
        algorithm="HS256",
    )

    with pytest.raises(MalformedTokenError):
        service.verify(token)


def test_verify_rejects_unknown_role(service):
    token, _ = service.issue(1, "admin2", "a@x.com")

    with pytest.raises(MalformedTokenError):
        service.verify(token)


def test_only_hmac_algorithms_accepted():
    with pytest.raises(ValueError):
        TokenService("s", ttl_hours=1, algorithm="RS256")
