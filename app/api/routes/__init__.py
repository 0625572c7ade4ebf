"""API route modules."""

from . import auth
from . import tweets
from . import users

__all__ = ["auth", "tweets", "users"]
