"""Pydantic schemas for tweets."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.user import UserRead, UserSummary


class TweetCreate(BaseModel):
    content: Optional[str] = None
    image: Optional[str] = Field(None, max_length=255)

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class TweetUpdate(BaseModel):
    content: Optional[str] = None
    image: Optional[str] = Field(None, max_length=255)

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class TweetRead(BaseModel):
    id: int
    content: str
    image: Optional[str] = None
    user_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        from_attributes=True,
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TweetWithAuthor(TweetRead):
    """Tweet together with a summary of its author."""

    user: UserSummary


class UserWithTweets(UserRead):
    """User profile together with the user's tweets, newest first."""

    tweets: list[TweetRead] = []


__all__ = [
    "TweetCreate",
    "TweetRead",
    "TweetUpdate",
    "TweetWithAuthor",
    "UserWithTweets",
]
