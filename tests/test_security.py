"""Tests for email codes and bearer token signing."""

from __future__ import annotations

import pytest
from jose import jwt

from app.core.config import settings
from app.core.security import (
    EMAIL_CODE_MAX,
    EMAIL_CODE_MIN,
    InvalidBearerTokenError,
    generate_email_code,
    is_valid_email,
    sign_bearer_token,
    verify_bearer_token,
)


def test_generate_email_code_is_eight_digits() -> None:
    for _ in range(200):
        code = generate_email_code()
        assert len(code) == 8
        assert code.isdigit()
        assert EMAIL_CODE_MIN <= int(code) <= EMAIL_CODE_MAX


@pytest.mark.parametrize(
    "email",
    ["a@x.com", "first.last@example.co.uk", "user+tag@sub.domain.io"],
)
def test_is_valid_email_accepts_addresses(email: str) -> None:
    assert is_valid_email(email)


@pytest.mark.parametrize(
    "email",
    ["", "plainaddress", "no-at.example.com", "user@nodot", "two words@example.com", "a@b@c.com"],
)
def test_is_valid_email_rejects_malformed_addresses(email: str) -> None:
    assert not is_valid_email(email)


def test_sign_and_verify_round_trip() -> None:
    token = sign_bearer_token(42)
    assert verify_bearer_token(token) == 42


def test_bearer_payload_only_carries_token_id() -> None:
    token = sign_bearer_token(7)
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    assert payload == {"tokenId": 7}


def test_verify_rejects_token_signed_with_other_secret() -> None:
    token = sign_bearer_token(42, secret_key="another-secret")
    with pytest.raises(InvalidBearerTokenError):
        verify_bearer_token(token)


def test_verify_rejects_garbage() -> None:
    with pytest.raises(InvalidBearerTokenError):
        verify_bearer_token("not-a-jwt")


@pytest.mark.parametrize(
    "payload",
    [{}, {"tokenId": None}, {"tokenId": "12"}, {"tokenId": True}, {"tokenId": 0}, {"sub": 3}],
)
def test_verify_returns_none_without_usable_token_id(payload: dict) -> None:
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    assert verify_bearer_token(token) is None


def test_verify_ignores_registered_claims() -> None:
    token = jwt.encode(
        {"tokenId": 5, "sub": 3, "exp": 1},
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    assert verify_bearer_token(token) == 5
