"""Service layer helpers for domain operations."""

from .auth import (
    AuthFlowError,
    EmailCodeExpiredError,
    EmailCodeInvalidError,
    EmailCodeOwnershipError,
    InvalidEmailError,
    LogoutResult,
    MalformedBearerTokenError,
    MissingFieldError,
    SessionTokenNotUsableError,
    UnknownUserError,
    authenticate,
    logout,
    refresh_session,
    resolve_session_user,
    start_login,
)
from .email import EmailDeliveryError, send_login_code_email
from .file_storage import FileStorage, FileStorageError, get_file_storage
from .tokens import EmailCodeGenerationError
from .tweets import (
    TweetNotFoundError,
    TweetPermissionError,
    TweetPersistenceError,
    create_tweet,
    delete_tweet,
    get_tweet_or_raise,
    list_tweets,
    update_tweet,
)
from .users import (
    UserEmailAlreadyExistsError,
    UserUpdateError,
    UserValidationError,
    UsernameAlreadyTakenError,
    create_user,
    delete_user,
    get_user_by_email,
    get_user_by_id,
    list_users,
    update_profile_picture,
    update_user,
)

__all__ = [
    "AuthFlowError",
    "EmailCodeExpiredError",
    "EmailCodeGenerationError",
    "EmailCodeInvalidError",
    "EmailCodeOwnershipError",
    "EmailDeliveryError",
    "FileStorage",
    "FileStorageError",
    "InvalidEmailError",
    "LogoutResult",
    "MalformedBearerTokenError",
    "MissingFieldError",
    "SessionTokenNotUsableError",
    "TweetNotFoundError",
    "TweetPermissionError",
    "TweetPersistenceError",
    "UnknownUserError",
    "UserEmailAlreadyExistsError",
    "UserUpdateError",
    "UserValidationError",
    "UsernameAlreadyTakenError",
    "authenticate",
    "create_tweet",
    "create_user",
    "delete_tweet",
    "delete_user",
    "get_file_storage",
    "get_tweet_or_raise",
    "get_user_by_email",
    "get_user_by_id",
    "list_tweets",
    "list_users",
    "logout",
    "refresh_session",
    "resolve_session_user",
    "send_login_code_email",
    "start_login",
    "update_profile_picture",
    "update_tweet",
]
