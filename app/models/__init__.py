"""ORM model exports."""

from .token import Token, TokenType
from .tweet import Tweet
from .user import User

__all__ = [
    "Token",
    "TokenType",
    "Tweet",
    "User",
]
