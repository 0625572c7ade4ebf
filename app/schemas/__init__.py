"""Pydantic schema exports."""

from .auth import (
    AuthenticateRequest,
    LoginRequest,
    RefreshResponse,
    SessionTokensRequest,
    TokenPair,
)
from .tweet import TweetCreate, TweetRead, TweetUpdate, TweetWithAuthor, UserWithTweets
from .user import ProfilePictureResponse, UserCreate, UserRead, UserSummary, UserUpdate

__all__ = [
    "AuthenticateRequest",
    "LoginRequest",
    "ProfilePictureResponse",
    "RefreshResponse",
    "SessionTokensRequest",
    "TokenPair",
    "TweetCreate",
    "TweetRead",
    "TweetUpdate",
    "TweetWithAuthor",
    "UserCreate",
    "UserRead",
    "UserSummary",
    "UserUpdate",
    "UserWithTweets",
]
