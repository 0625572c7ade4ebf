"""Pydantic schemas powering user routes."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserCreate(BaseModel):
    """Incoming payload for explicit registration."""

    email: Optional[str] = None
    name: Optional[str] = None
    username: Optional[str] = None

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class UserUpdate(BaseModel):
    """Mutable profile fields."""

    name: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None
    image: Optional[str] = Field(None, max_length=255)

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class UserSummary(BaseModel):
    """Author information embedded in tweet listings."""

    id: int
    name: Optional[str] = None
    username: Optional[str] = None
    image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)


class UserRead(BaseModel):
    """Schema representing the public view of a user."""

    id: int
    email: str
    name: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    image: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        from_attributes=True,
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ProfilePictureResponse(BaseModel):
    """Response returned once a new profile picture is stored."""

    success: str
    updated_user: UserRead

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


__all__ = [
    "ProfilePictureResponse",
    "UserCreate",
    "UserRead",
    "UserSummary",
    "UserUpdate",
]
