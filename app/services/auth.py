"""Passwordless login, session rotation and logout flows.

A session is a pair of ``API`` and ``REFRESH`` token rows, handed to clients as
two signed bearer strings. The protected-route gate and the refresh flow both
decide whether a row is still usable through ``is_token_usable``. The gate
rejects an expired access token outright, while the refresh flow falls back to
the refresh token and mints a new pair.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import is_valid_email, verify_bearer_token
from app.models.user import User
from app.schemas.auth import RefreshResponse, TokenPair
from app.services.email import EmailDeliveryError
from app.services.tokens import (
    EmailCodeGenerationError,
    consume_token,
    get_email_token,
    get_token,
    is_token_expired,
    is_token_usable,
    issue_email_code,
    issue_session_pair,
    revoke_bearer_token,
)
from app.services.users import get_or_create_user, get_user_by_email, normalize_email

logger = logging.getLogger(__name__)


class AuthFlowError(Exception):
    """Base class for expected failures of the auth flows.

    The exception message is the text shown to the client.
    """


class MissingFieldError(AuthFlowError):
    """A required field was not provided."""


class InvalidEmailError(AuthFlowError):
    """The email address does not look like one."""


class UnknownUserError(AuthFlowError):
    """Login was attempted for an address without an account."""


class EmailCodeInvalidError(AuthFlowError):
    """The email code does not exist or was already used."""


class EmailCodeExpiredError(AuthFlowError):
    """The email code exists but its time window has passed."""


class EmailCodeOwnershipError(AuthFlowError):
    """The email code belongs to another user than the one claimed."""


class MalformedBearerTokenError(Exception):
    """A bearer token verified but carries no usable ``tokenId``."""


class SessionTokenNotUsableError(Exception):
    """The token row behind a bearer is missing, invalidated or expired."""


@dataclass(frozen=True)
class LogoutResult:
    """Which of the presented tokens were actually revoked."""

    access_revoked: bool = False
    refresh_revoked: bool = False


def _require_token_id(bearer: str) -> int:
    token_id = verify_bearer_token(bearer)
    if token_id is None:
        raise MalformedBearerTokenError("Bearer token carries no token id")
    return token_id


def start_login(
    db: Session,
    email: Optional[str],
    *,
    email_sender: Callable[[str, str], None] | None = None,
    require_existing_user: bool | None = None,
) -> None:
    """Send a one-time code to ``email``.

    Unless ``require_existing_user`` is set (defaulting to
    ``settings.login_requires_existing_user``), an unknown address gets a new
    account. The user row and the email token are committed only once the code
    has been handed to the sender.

    Raises:
        MissingFieldError, InvalidEmailError, UnknownUserError: Bad input.
        EmailDeliveryError, EmailCodeGenerationError, SQLAlchemyError: The
            code could not be issued; nothing was committed.
    """

    if not email:
        raise MissingFieldError("Please, type your E-mail")
    if not is_valid_email(email):
        raise InvalidEmailError("The email address you entered is invalid.")

    if require_existing_user is None:
        require_existing_user = settings.login_requires_existing_user

    try:
        if require_existing_user:
            user = get_user_by_email(db, email)
            if user is None:
                raise UnknownUserError("No user found with the e-mail provided;")
        else:
            user = get_or_create_user(db, email)

        issue_email_code(db, user, email_sender=email_sender)
        db.commit()
    except (EmailDeliveryError, EmailCodeGenerationError, SQLAlchemyError):
        db.rollback()
        logger.exception("Failed to issue a login code")
        raise


def authenticate(db: Session, email: Optional[str], email_token: Optional[str]) -> TokenPair:
    """Exchange an email code for a new session pair.

    Consuming the code and minting the pair share one transaction. The code is
    consumed with a conditional update, so a concurrent replay of the same code
    fails with ``EmailCodeInvalidError`` instead of minting a second pair.
    """

    if not email:
        raise MissingFieldError("The email field was not provided")
    if not email_token:
        raise MissingFieldError("The token field was not provided")

    token = get_email_token(db, email_token)
    if token is None or not token.valid:
        raise EmailCodeInvalidError("The password is invalid")
    if is_token_expired(token):
        raise EmailCodeExpiredError("The password has expired")
    if token.user.email != normalize_email(email):
        raise EmailCodeOwnershipError("unauthorized")

    try:
        if not consume_token(db, token):
            db.rollback()
            raise EmailCodeInvalidError("The password is invalid")
        pair = issue_session_pair(db, token.user)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to exchange email token %s", token.id)
        raise

    logger.info("User %s authenticated with email token %s", token.user_id, token.id)
    return pair


def resolve_session_user(db: Session, bearer: str) -> User:
    """Return the owner of the access token behind ``bearer``.

    Raises:
        InvalidBearerTokenError: The signature does not verify.
        MalformedBearerTokenError: The payload has no ``tokenId``.
        SessionTokenNotUsableError: The row is missing, invalid or expired.
    """

    token = get_token(db, _require_token_id(bearer))
    if token is None or not is_token_usable(token):
        raise SessionTokenNotUsableError("API token expired")
    return token.user


def refresh_session(
    db: Session,
    access_token: Optional[str],
    refresh_token: Optional[str],
    *,
    revoke_previous: bool | None = None,
) -> RefreshResponse:
    """Check the access token and rotate the pair when it is spent.

    ``still_valid`` only reports whether the access token was still usable; a
    rotation is signalled by ``updated_tokens``. When ``revoke_previous`` is
    set (defaulting to ``settings.revoke_tokens_on_rotation``) the spent
    access token and the used refresh token are invalidated in the rotating
    transaction.

    Raises:
        MissingFieldError: Either token is missing.
        InvalidBearerTokenError, MalformedBearerTokenError: A token that had
            to be inspected could not be read.
    """

    if not access_token or not refresh_token:
        raise MissingFieldError("Both accessToken and refreshToken are required")

    access = get_token(db, _require_token_id(access_token))
    if is_token_usable(access):
        return RefreshResponse(still_valid=True)

    refresh = get_token(db, _require_token_id(refresh_token))
    if not is_token_usable(refresh):
        return RefreshResponse(still_valid=False)

    if revoke_previous is None:
        revoke_previous = settings.revoke_tokens_on_rotation

    try:
        if revoke_previous:
            if not consume_token(db, refresh):
                db.rollback()
                return RefreshResponse(still_valid=False)
            if access is not None:
                consume_token(db, access)
        pair = issue_session_pair(db, refresh.user)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("Rotated session for user %s using refresh token %s", refresh.user_id, refresh.id)
    return RefreshResponse(still_valid=False, updated_tokens=pair)


def logout(
    db: Session,
    access_token: Optional[str] = None,
    refresh_token: Optional[str] = None,
) -> LogoutResult:
    """Invalidate whichever of the two tokens were presented.

    Each token is revoked independently; a token that cannot be revoked is
    logged and reported as not revoked.
    """

    access_revoked = revoke_bearer_token(db, access_token) if access_token else False
    refresh_revoked = revoke_bearer_token(db, refresh_token) if refresh_token else False
    return LogoutResult(access_revoked=access_revoked, refresh_revoked=refresh_revoked)


__all__ = [
    "AuthFlowError",
    "EmailCodeExpiredError",
    "EmailCodeInvalidError",
    "EmailCodeOwnershipError",
    "InvalidEmailError",
    "LogoutResult",
    "MalformedBearerTokenError",
    "MissingFieldError",
    "SessionTokenNotUsableError",
    "UnknownUserError",
    "authenticate",
    "logout",
    "refresh_session",
    "resolve_session_user",
    "start_login",
]
