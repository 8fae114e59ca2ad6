# tests/test_security.py

"""
Tests for password hashing and token issuance/verification.
"""

from datetime import timedelta

import pytest

from buildsmart.core.exceptions import InvalidTokenError, TokenExpiredError
from buildsmart.core.roles import Permission, Role
from buildsmart.core.security import (
    create_access_token,
    decode_token,
    hash_password,
    resolve_identity,
    verify_password,
)


@pytest.mark.parametrize("password", ["demo123", "correct horse battery staple", "pässwörd✓", "x" * 100])
def test_hash_then_verify(password):
    assert verify_password(password, hash_password(password))


def test_wrong_password_does_not_verify():
    hashed = hash_password("demo123")
    assert not verify_password("demo124", hashed)
    assert not verify_password("", hashed)


def test_same_password_hashes_differently():
    first, second = hash_password("demo123"), hash_password("demo123")
    assert first != second
    assert verify_password("demo123", first)
    assert verify_password("demo123", second)


def test_malformed_hash_verifies_false():
    assert not verify_password("demo123", "not-a-bcrypt-hash")


def _token(**overrides):
    kwargs = dict(
        user_id="u-1",
        email="amit@buildsmart.in",
        role=Role.SUPERVISOR,
        permissions=[Permission.ASSIGN_TASKS, Permission.VIEW_SAFETY],
    )
    kwargs.update(overrides)
    return create_access_token(**kwargs)


def test_token_round_trip_preserves_claims():
    claims = decode_token(_token())
    assert claims.sub == "u-1"
    assert claims.email == "amit@buildsmart.in"
    assert claims.role == Role.SUPERVISOR
    assert claims.permissions == [Permission.ASSIGN_TASKS, Permission.VIEW_SAFETY]


def test_default_expiry_is_seven_days():
    claims = decode_token(_token())
    assert claims.exp - claims.iat == 7 * 24 * 3600


def test_expired_token_is_rejected():
    token = _token(expires_delta=timedelta(seconds=-5))
    with pytest.raises(TokenExpiredError):
        decode_token(token)


def _tamper(token: str, segment: int, position: int) -> str:
    parts = token.split(".")
    chars = list(parts[segment])
    chars[position] = "A" if chars[position] != "A" else "B"
    parts[segment] = "".join(chars)
    return ".".join(parts)


@pytest.mark.parametrize("segment", [0, 1, 2])
def test_tampered_token_is_rejected(segment):
    token = _token()
    length = len(token.split(".")[segment])
    # last char may only carry padding bits, so leave it alone
    for position in range(0, length - 1, 3):
        with pytest.raises(InvalidTokenError):
            decode_token(_tamper(token, segment, position))


def test_token_signed_with_other_secret_is_rejected(monkeypatch):
    from buildsmart.core.config import settings

    token = _token()
    monkeypatch.setattr(settings, "JWT_SECRET", "another-secret")
    with pytest.raises(InvalidTokenError):
        decode_token(token)


@pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "Bearer"])
def test_garbage_tokens_are_invalid(garbage):
    with pytest.raises(InvalidTokenError):
        decode_token(garbage)


def test_resolve_identity():
    assert resolve_identity(None) is None
    assert resolve_identity("Basic dXNlcjpwYXNz") is None
    assert resolve_identity("Bearer not-a-jwt") is None

    user = resolve_identity(f"Bearer {_token()}")
    assert user.id == "u-1"
    assert user.role == Role.SUPERVISOR
    assert user.expires_at is not None


def test_resolve_identity_raises_on_expired():
    token = _token(expires_delta=timedelta(seconds=-5))
    with pytest.raises(TokenExpiredError):
        resolve_identity(f"Bearer {token}")
