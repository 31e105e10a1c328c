"""Tests for session token issuance and verification."""

from datetime import datetime, timedelta, UTC

import jwt
import pytest

from saasboard.config import get_settings
from saasboard.errors import ExpiredToken, InvalidOrExpiredToken, InvalidToken
from saasboard.models.enums import Role
from saasboard.schemas.auth import SessionClaims
from saasboard.security.passwords import hash_password, verify_password
from saasboard.security.tokens import issue_token, verify_token


def _encode(payload: dict, secret: str | None = None) -> str:
    settings = get_settings()
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)


def test_issue_then_verify_returns_same_claims():
    claims = SessionClaims(user_id=42, email="a@example.com", role=Role.ADMIN)
    assert verify_token(issue_token(claims)) == claims


def test_token_expires_after_configured_days():
    token = issue_token(SessionClaims(user_id=1, email="a@example.com", role=Role.USER))
    payload = jwt.decode(token, options={"verify_signature": False})
    assert payload["exp"] - payload["iat"] == get_settings().jwt_expire_days * 86400


def test_expired_token_rejected():
    now = datetime.now(UTC)
    token = _encode({"sub": "1", "email": "a@example.com", "role": "USER",
                     "iat": now - timedelta(days=8), "exp": now - timedelta(days=1)})
    with pytest.raises(ExpiredToken):
        verify_token(token)


def test_wrong_secret_rejected():
    now = datetime.now(UTC)
    token = _encode({"sub": "1", "email": "a@example.com", "role": "USER",
                     "iat": now, "exp": now + timedelta(days=1)}, secret="some-other-secret-value-here")
    with pytest.raises(InvalidToken):
        verify_token(token)


def test_garbage_token_rejected():
    with pytest.raises(InvalidOrExpiredToken):
        verify_token("not.a.jwt")


def test_unknown_role_in_payload_rejected():
    now = datetime.now(UTC)
    token = _encode({"sub": "1", "email": "a@example.com", "role": "SUPERUSER",
                     "iat": now, "exp": now + timedelta(days=1)})
    with pytest.raises(InvalidToken):
        verify_token(token)


def test_missing_subject_rejected():
    now = datetime.now(UTC)
    token = _encode({"email": "a@example.com", "role": "USER", "iat": now, "exp": now + timedelta(days=1)})
    with pytest.raises(InvalidToken):
        verify_token(token)


def test_password_hash_round_trip():
    password_hash = hash_password("hunter22")
    assert password_hash != "hunter22"
    assert verify_password("hunter22", password_hash)
    assert not verify_password("hunter23", password_hash)


def test_verify_password_with_malformed_hash():
    assert verify_password("anything", "not-a-bcrypt-hash") is False
