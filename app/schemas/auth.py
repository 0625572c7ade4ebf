"""Authentication-related Pydantic schemas.

Request fields are optional at the schema level so that the auth routes can
answer missing fields with their own status codes and messages.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LoginRequest(BaseModel):
    """Payload starting a passwordless login."""

    email: Optional[str] = None

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class AuthenticateRequest(BaseModel):
    """Payload exchanging an email code for a session pair."""

    email: Optional[str] = None
    email_token: Optional[str] = None

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SessionTokensRequest(BaseModel):
    """Payload carrying a session pair, used by refresh and logout."""

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TokenPair(BaseModel):
    """Signed access and refresh bearer tokens."""

    access_token: str
    refresh_token: str

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class RefreshResponse(BaseModel):
    """Outcome of a refresh call.

    ``still_valid`` only says whether the presented access token was still
    usable. A successful rotation is signalled by ``updated_tokens``.
    """

    still_valid: bool
    updated_tokens: Optional[TokenPair] = None

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


__all__ = [
    "AuthenticateRequest",
    "LoginRequest",
    "RefreshResponse",
    "SessionTokensRequest",
    "TokenPair",
]
