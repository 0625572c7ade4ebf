"""Token ORM model backing email codes and bearer credentials."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.sql import expression
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.user import User


class TokenType(str, enum.Enum):
    """Kinds of token rows."""

    EMAIL = "EMAIL"
    API = "API"
    REFRESH = "REFRESH"


class Token(Base):
    """A single credential record.

    ``EMAIL`` rows carry the one-time code in ``value``. ``API`` and
    ``REFRESH`` rows carry no secret: the bearer string handed to clients is a
    signed wrapper around ``id``. Rows are never deleted by the auth flows;
    they only ever flip ``valid`` to false.
    """

    __tablename__ = "tokens"
    __table_args__ = (
        UniqueConstraint("value", name="uq_tokens_value"),
        Index("ix_tokens_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[TokenType] = mapped_column(
        Enum(TokenType, name="token_type"),
        nullable=False,
    )
    value: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    expiration: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    valid: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=expression.true(),
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="tokens",
    )


__all__ = ["Token", "TokenType"]
