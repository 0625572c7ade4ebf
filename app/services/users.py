"""Repository helpers for interacting with user records."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.security import is_valid_email
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate
from app.services.email import EmailDeliveryError
from app.services.file_storage import FileStorage, FileStorageError
from app.services.tokens import EmailCodeGenerationError, issue_email_code

logger = logging.getLogger(__name__)

DEFAULT_BIO = "Hello, I'm new on Twitter"


class UserValidationError(Exception):
    """Raised when a registration payload is incomplete or malformed."""


class UserEmailAlreadyExistsError(Exception):
    """Raised when attempting to create a user with an email that already exists."""

    def __init__(self, email: str) -> None:
        super().__init__(f"A user with email '{email}' already exists")
        self.email = email


class UsernameAlreadyTakenError(Exception):
    """Raised when a username (or a racing email) violates a unique constraint."""


class UserUpdateError(Exception):
    """Raised when persisting profile changes fails."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Fetch a user by email address."""

    statement = select(User).where(User.email == normalize_email(email))
    result = db.execute(statement)
    return result.scalar_one_or_none()


def get_user_by_id(db: Session, user_id: int, *, with_tweets: bool = False) -> Optional[User]:
    statement = select(User).where(User.id == user_id)
    if with_tweets:
        statement = statement.options(selectinload(User.tweets))
    return db.execute(statement).scalar_one_or_none()


def list_users(db: Session) -> List[User]:
    return list(db.execute(select(User).order_by(User.id)).scalars())


def get_or_create_user(db: Session, email: str) -> User:
    """Return the user owning ``email``, inserting it when absent.

    The insert runs in a savepoint so that losing a race against a concurrent
    login for the same address only discards the duplicate row, after which the
    winner's row is read back. Nothing is committed here.
    """

    normalized_email = normalize_email(email)
    existing = get_user_by_email(db, normalized_email)
    if existing is not None:
        return existing

    user = User(email=normalized_email)
    try:
        with db.begin_nested():
            db.add(user)
    except IntegrityError:
        existing = get_user_by_email(db, normalized_email)
        if existing is None:
            raise
        return existing

    logger.info("Created user %s on first login", user.id)
    return user


def create_user(
    db: Session,
    user_in: UserCreate,
    *,
    email_sender: Callable[[str, str], None] | None = None,
) -> User:
    """Register a user explicitly and send them a first login code.

    The new row and its email token are committed together, after the code has
    been handed to the sender; a delivery failure rolls both back.
    """

    if not user_in.name:
        raise UserValidationError("You need to provide a name")
    if not user_in.username:
        raise UserValidationError("You need to provide a username")
    if not user_in.email or not is_valid_email(user_in.email):
        raise UserValidationError("The email address you entered is invalid.")

    normalized_email = normalize_email(user_in.email)
    if get_user_by_email(db, normalized_email) is not None:
        raise UserEmailAlreadyExistsError(normalized_email)

    user = User(
        email=normalized_email,
        name=user_in.name,
        username=user_in.username,
        bio=DEFAULT_BIO,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise UsernameAlreadyTakenError("Username and email should be unique.") from exc

    try:
        issue_email_code(db, user, email_sender=email_sender)
        db.commit()
    except (EmailDeliveryError, EmailCodeGenerationError, SQLAlchemyError):
        db.rollback()
        logger.exception("Failed to send the first login code to a new user")
        raise

    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def update_user(db: Session, user: User, update: UserUpdate) -> User:
    """Apply the fields present in ``update`` to ``user``."""

    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(user, field, value)

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise UserUpdateError("Failed to update the user.") from exc

    db.refresh(user)
    return user


def delete_user(db: Session, user: User) -> None:
    """Remove a user; tweets and tokens go with it."""

    user_id = user.id
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s", user_id)


def update_profile_picture(
    db: Session,
    user: User,
    *,
    content: bytes,
    filename: str,
    mime_type: str,
    storage: FileStorage,
) -> User:
    """Upload a new profile picture and drop the previous one from storage.

    Upload failures propagate as ``FileStorageError``. Removing the old file is
    best effort: a failure there is logged and the new picture is kept.
    """

    file_id = storage.upload(content, filename, mime_type)
    previous = user.image
    user.image = file_id
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise UserUpdateError("Failed to update the user.") from exc
    db.refresh(user)

    if previous and previous != file_id:
        try:
            storage.delete(previous)
        except FileStorageError:
            logger.warning("Could not delete previous profile picture %s", previous)

    return user


__all__ = [
    "DEFAULT_BIO",
    "UserEmailAlreadyExistsError",
    "UserUpdateError",
    "UserValidationError",
    "UsernameAlreadyTakenError",
    "create_user",
    "delete_user",
    "get_or_create_user",
    "get_user_by_email",
    "get_user_by_id",
    "list_users",
    "normalize_email",
    "update_profile_picture",
    "update_user",
]
