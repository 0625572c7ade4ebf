"""Authentication dependencies for API routes."""

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session

from app.core.errors import TokenExpiredError, UnauthorizedError
from app.core.security import InvalidBearerTokenError
from app.db.session import get_db
from app.models.user import User
from app.services.auth import (
    MalformedBearerTokenError,
    SessionTokenNotUsableError,
    resolve_session_user,
)


def require_authenticated_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Validate the request's bearer token and return the user behind it.

    A missing or unreadable credential is rejected with an empty 401. A
    credential whose token row is invalidated or expired is rejected with
    ``{"error": "API token expired"}`` so clients know to refresh.
    """

    scheme, credentials = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() != "bearer" or not credentials:
        raise UnauthorizedError()

    try:
        user = resolve_session_user(db, credentials)
    except (InvalidBearerTokenError, MalformedBearerTokenError) as exc:
        raise UnauthorizedError() from exc
    except SessionTokenNotUsableError as exc:
        raise TokenExpiredError("API token expired") from exc

    request.state.user = user
    return user


__all__ = ["require_authenticated_user"]
