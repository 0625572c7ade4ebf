"""Security helpers for email codes and signed bearer tokens.

A bearer token is a JWT whose payload is exactly ``{"tokenId": <id>}``. It
carries neither ``iat`` nor ``exp``: validity, expiry and ownership live on
the referenced token row and are re-checked on every use.
"""

from __future__ import annotations

import re
import secrets
from typing import Any

from jose import JWTError, jwt

from app.core.config import settings

EMAIL_CODE_MIN = 10_000_000
EMAIL_CODE_MAX = 99_999_999

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Bearers carry no registered claims, so only the signature is checked.
_DECODE_OPTIONS = {
    "verify_aud": False,
    "verify_iat": False,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
    "verify_at_hash": False,
}


class InvalidBearerTokenError(Exception):
    """Raised when a bearer token is tampered with, garbage, or signed with another key."""


def generate_email_code() -> str:
    """Return a uniformly drawn 8-digit one-time code."""

    return str(EMAIL_CODE_MIN + secrets.randbelow(EMAIL_CODE_MAX - EMAIL_CODE_MIN + 1))


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_PATTERN.match(email))


def sign_bearer_token(token_id: int, *, secret_key: str | None = None) -> str:
    """Sign a bearer token wrapping the id of a token row."""

    payload: dict[str, Any] = {"tokenId": token_id}
    return jwt.encode(
        payload,
        secret_key or settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def verify_bearer_token(token: str, *, secret_key: str | None = None) -> int | None:
    """Verify a bearer token and return the wrapped token id.

    Returns ``None`` when the signature is valid but the payload carries no
    usable ``tokenId``; callers treat that as unauthenticated.

    Raises:
        InvalidBearerTokenError: If the signature does not verify.
    """

    try:
        payload = jwt.decode(
            token,
            secret_key or settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options=_DECODE_OPTIONS,
        )
    except JWTError as exc:
        raise InvalidBearerTokenError("Bearer token signature is invalid") from exc

    token_id = payload.get("tokenId")
    if isinstance(token_id, bool) or not isinstance(token_id, int) or token_id <= 0:
        return None
    return token_id


__all__ = [
    "EMAIL_CODE_MAX",
    "EMAIL_CODE_MIN",
    "InvalidBearerTokenError",
    "generate_email_code",
    "is_valid_email",
    "sign_bearer_token",
    "verify_bearer_token",
]
