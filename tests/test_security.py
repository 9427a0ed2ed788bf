"""Password hashing and token issuing/verification."""

import pytest
from fastapi import status

from magicstream.core.config import settings
from magicstream.core.security import (
    CredentialsException,
    InvalidClaimsException,
    InvalidTokenException,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    hash_password,
    issue_tokens,
    verify_password,
)


def test_hash_and_verify_password():
    password_hash = hash_password("s3cret-pass")

    assert password_hash != "s3cret-pass"
    assert verify_password("s3cret-pass", password_hash)
    assert not verify_password("other-pass", password_hash)


def test_verify_password_with_garbage_hash_is_false():
    assert verify_password("s3cret-pass", "not-a-bcrypt-hash") is False


def test_access_token_round_trip(user):
    claims = decode_access_token(create_access_token(user))

    assert claims.sub == user.user_id
    assert claims.email == user.email
    assert claims.role == user.role
    assert claims.type == "access"


def test_refresh_token_fails_access_verification(user):
    with pytest.raises(InvalidTokenException):
        decode_access_token(create_refresh_token(user))


def test_garbage_token_is_invalid():
    with pytest.raises(InvalidTokenException) as exc:
        decode_access_token("abc.def.ghi")
    assert exc.value.status_code == status.HTTP_401_UNAUTHORIZED
    assert exc.value.headers == {"WWW-Authenticate": "Bearer"}


def test_issue_tokens(user):
    tokens = issue_tokens(user)

    assert tokens.token_type == "bearer"
    assert tokens.expires_in == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    assert tokens.access_token != tokens.refresh_token


def test_credentials_exceptions_share_401():
    assert issubclass(InvalidClaimsException, CredentialsException)
    assert InvalidClaimsException().status_code == 401
