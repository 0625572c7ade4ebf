"""API dependency exports."""

from app.db.session import get_db
from app.services.file_storage import get_file_storage

from .auth import require_authenticated_user

__all__ = [
    "get_db",
    "get_file_storage",
    "require_authenticated_user",
]
