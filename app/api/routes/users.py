"""User management routes."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.dependencies import get_db, get_file_storage, require_authenticated_user
from app.core.config import settings
from app.core.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    InternalServerError,
    NotFoundError,
)
from app.models.user import User
from app.schemas.tweet import UserWithTweets
from app.schemas.user import ProfilePictureResponse, UserCreate, UserRead, UserUpdate
from app.services.email import EmailDeliveryError
from app.services.file_storage import FileStorage, FileStorageError
from app.services.tokens import EmailCodeGenerationError
from app.services.users import (
    UserEmailAlreadyExistsError,
    UserUpdateError,
    UserValidationError,
    UsernameAlreadyTakenError,
    create_user,
    delete_user,
    get_user_by_id,
    list_users,
    update_profile_picture,
    update_user,
)

router = APIRouter(tags=["users"])
logger = logging.getLogger(__name__)


def _get_own_user(user_id: int, current_user: User, db: Session) -> User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if user.id != current_user.id:
        raise ForbiddenError("You can only modify your own account.")
    return user


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register_user(payload: UserCreate, db: Session = Depends(get_db)) -> User:
    """Create an account and e-mail it a first login code."""

    try:
        return create_user(db, payload)
    except UserValidationError as exc:
        raise BadRequestError(str(exc)) from exc
    except UserEmailAlreadyExistsError as exc:
        raise ConflictError(
            "The email address provided is already associated with an existing account."
        ) from exc
    except UsernameAlreadyTakenError as exc:
        raise BadRequestError("Username and email should be unique.") from exc
    except (EmailDeliveryError, EmailCodeGenerationError, SQLAlchemyError) as exc:
        raise InternalServerError("Internal server error, please try again later.") from exc


@router.get("/loggedUser", response_model=UserRead)
def read_logged_user(current_user: User = Depends(require_authenticated_user)) -> User:
    return current_user


@router.get("", response_model=List[UserRead])
def read_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_authenticated_user),
) -> List[User]:
    return list_users(db)


@router.post(
    "/updateProfilePicture",
    response_model=ProfilePictureResponse,
    status_code=status.HTTP_201_CREATED,
)
def upload_profile_picture(
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    current_user: User = Depends(require_authenticated_user),
) -> ProfilePictureResponse:
    """Store a new profile picture for the authenticated user."""

    if image is None:
        raise BadRequestError("Image not provided")

    content = image.file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        raise BadRequestError("File too large. Maximum size is 15MB.")

    try:
        user = update_profile_picture(
            db,
            current_user,
            content=content,
            filename=image.filename or "profile-picture",
            mime_type=image.content_type or "application/octet-stream",
            storage=storage,
        )
    except (FileStorageError, UserUpdateError) as exc:
        logger.error("Failed to update the profile picture of user %s", current_user.id, exc_info=True)
        raise InternalServerError("Failed to update the profile image.") from exc

    return ProfilePictureResponse(
        success="Profile picture updated successfully.",
        updated_user=UserRead.model_validate(user),
    )


@router.get("/{user_id}", response_model=UserWithTweets)
def read_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_authenticated_user),
) -> User:
    user = get_user_by_id(db, user_id, with_tweets=True)
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.put("/{user_id}", response_model=UserRead)
def edit_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_authenticated_user),
) -> User:
    user = _get_own_user(user_id, current_user, db)
    try:
        return update_user(db, user, payload)
    except UserUpdateError as exc:
        raise BadRequestError(str(exc)) from exc


@router.delete("/{user_id}")
def remove_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_authenticated_user),
) -> Response:
    user = _get_own_user(user_id, current_user, db)
    delete_user(db, user)
    return Response(status_code=status.HTTP_200_OK)


__all__ = ["router"]
