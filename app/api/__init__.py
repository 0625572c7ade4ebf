"""Public API package exports."""

from .dependencies import require_authenticated_user
from app.api.routes.auth import router as auth_router
from app.api.routes.tweets import router as tweets_router
from app.api.routes.users import router as users_router

__all__ = ["require_authenticated_user", "auth_router", "tweets_router", "users_router"]
