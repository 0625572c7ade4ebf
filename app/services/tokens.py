"""Token issuance and the shared token-validation primitive.

Apart from ``revoke_bearer_token``, every operation here takes the caller's
session and leaves committing to the caller, so that issuing and consuming
tokens can be combined into a single transaction.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.security import (
    InvalidBearerTokenError,
    generate_email_code,
    sign_bearer_token,
    verify_bearer_token,
)
from app.models.token import Token, TokenType
from app.models.user import User
from app.schemas.auth import TokenPair
from app.services.email import send_login_code_email

logger = logging.getLogger(__name__)

_MAX_CODE_ATTEMPTS = 5


class EmailCodeGenerationError(Exception):
    """Raised when no unused email code could be drawn."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_to_utc(dt: datetime) -> datetime:
    """Ensure a datetime is timezone-aware in UTC."""

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_token_expired(token: Token, now: datetime | None = None) -> bool:
    current = now or _utcnow()
    return _normalize_to_utc(token.expiration) <= current


def is_token_usable(token: Token | None, now: datetime | None = None) -> bool:
    """Return True when the token exists, is still valid and has not expired."""

    if token is None or not token.valid:
        return False
    return not is_token_expired(token, now)


def get_token(db: Session, token_id: int) -> Token | None:
    """Fetch a token row together with its owning user."""

    statement = (
        select(Token)
        .options(joinedload(Token.user))
        .where(Token.id == token_id)
    )
    return db.execute(statement).scalar_one_or_none()


def get_email_token(db: Session, code: str) -> Token | None:
    """Fetch the email token carrying ``code`` together with its owning user."""

    statement = (
        select(Token)
        .options(joinedload(Token.user))
        .where(Token.value == code, Token.type == TokenType.EMAIL)
    )
    return db.execute(statement).scalar_one_or_none()


def _draw_unused_code(db: Session) -> str:
    for _ in range(_MAX_CODE_ATTEMPTS):
        code = generate_email_code()
        taken = db.execute(select(Token.id).where(Token.value == code)).first()
        if taken is None:
            return code
    raise EmailCodeGenerationError("Could not draw an unused email code")


def issue_email_code(
    db: Session,
    user: User,
    *,
    email_sender: Callable[[str, str], None] | None = None,
) -> str:
    """Persist a new single-use email token for ``user`` and deliver its code.

    Delivery failures propagate (``EmailDeliveryError``) so that the caller can
    roll the new token back together with anything else in the transaction.
    """

    code = _draw_unused_code(db)
    token = Token(
        type=TokenType.EMAIL,
        value=code,
        expiration=_utcnow() + timedelta(minutes=settings.email_token_expire_minutes),
        valid=True,
        user_id=user.id,
    )
    db.add(token)
    db.flush()
    logger.info("Issued email token %s for user %s", token.id, user.id)

    sender = email_sender or send_login_code_email
    sender(user.email, code)
    return code


def issue_session_pair(db: Session, user: User) -> TokenPair:
    """Create an API and a REFRESH token row for ``user`` and sign both ids.

    This is the only place new sessions are minted.
    """

    now = _utcnow()
    access = Token(
        type=TokenType.API,
        expiration=now + timedelta(hours=settings.access_token_expire_hours),
        valid=True,
        user_id=user.id,
    )
    refresh = Token(
        type=TokenType.REFRESH,
        expiration=now + timedelta(days=settings.refresh_token_expire_days),
        valid=True,
        user_id=user.id,
    )
    db.add_all([access, refresh])
    db.flush()
    logger.info(
        "Issued session pair for user %s (access=%s, refresh=%s)",
        user.id,
        access.id,
        refresh.id,
    )
    return TokenPair(
        access_token=sign_bearer_token(access.id),
        refresh_token=sign_bearer_token(refresh.id),
    )


def consume_token(db: Session, token: Token) -> bool:
    """Flip a still-valid token to invalid.

    The update is conditional on ``valid`` being true, so of two concurrent
    redemptions of the same token only one sees a row count of 1.
    """

    result = db.execute(
        update(Token)
        .where(Token.id == token.id, Token.valid.is_(True))
        .values(valid=False)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def invalidate_token(db: Session, token_id: int) -> bool:
    """Mark a token invalid. Returns False when no such token exists."""

    result = db.execute(
        update(Token)
        .where(Token.id == token_id)
        .values(valid=False)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def revoke_bearer_token(db: Session, bearer: str) -> bool:
    """Invalidate the token row behind a bearer string, committing on success.

    Failures are logged and reported through the return value instead of
    raised: bad signature, missing ``tokenId``, unknown token or a store error
    all yield False.
    """

    try:
        token_id = verify_bearer_token(bearer)
    except InvalidBearerTokenError:
        logger.warning("Refusing to revoke a bearer token with an invalid signature")
        return False

    if token_id is None:
        logger.warning("Refusing to revoke a bearer token without a token id")
        return False

    try:
        revoked = invalidate_token(db, token_id)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to revoke token %s", token_id)
        return False

    if not revoked:
        logger.warning("Token %s not found during revocation", token_id)
    return revoked


__all__ = [
    "EmailCodeGenerationError",
    "consume_token",
    "get_email_token",
    "get_token",
    "invalidate_token",
    "is_token_expired",
    "is_token_usable",
    "issue_email_code",
    "issue_session_pair",
    "revoke_bearer_token",
]
