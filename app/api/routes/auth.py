"""Authentication API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.dependencies import get_db
from app.core.config import settings
from app.core.errors import BadRequestError, InternalServerError, UnauthorizedError
from app.core.security import InvalidBearerTokenError
from app.schemas.auth import AuthenticateRequest, LoginRequest, SessionTokensRequest, TokenPair
from app.services.auth import (
    EmailCodeExpiredError,
    EmailCodeInvalidError,
    EmailCodeOwnershipError,
    InvalidEmailError,
    MalformedBearerTokenError,
    MissingFieldError,
    UnknownUserError,
    authenticate,
    logout,
    refresh_session,
    start_login,
)
from app.services.email import EmailDeliveryError
from app.services.tokens import EmailCodeGenerationError

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

INTERNAL_ERROR_MESSAGE = "Internal server error, please try again later."


@router.post("/login")
@limiter.limit(settings.login_rate_limit)
def login(
    request: Request,
    payload: Optional[LoginRequest] = None,
    db: Session = Depends(get_db),
) -> Response:
    """Send a one-time login code to the given address."""

    payload = payload or LoginRequest()
    try:
        start_login(db, payload.email)
    except (MissingFieldError, InvalidEmailError) as exc:
        raise BadRequestError(str(exc)) from exc
    except UnknownUserError as exc:
        raise UnauthorizedError(str(exc)) from exc
    except (EmailDeliveryError, EmailCodeGenerationError, SQLAlchemyError) as exc:
        raise InternalServerError(INTERNAL_ERROR_MESSAGE) from exc

    return Response(status_code=status.HTTP_200_OK)


@router.post("/authenticate", response_model=TokenPair)
def authenticate_with_email_code(
    payload: Optional[AuthenticateRequest] = None,
    db: Session = Depends(get_db),
) -> TokenPair:
    """Exchange an email code for an access and a refresh token."""

    payload = payload or AuthenticateRequest()
    try:
        return authenticate(db, payload.email, payload.email_token)
    except MissingFieldError as exc:
        raise BadRequestError(str(exc)) from exc
    except (EmailCodeInvalidError, EmailCodeExpiredError, EmailCodeOwnershipError) as exc:
        raise UnauthorizedError(str(exc)) from exc
    except SQLAlchemyError as exc:
        raise InternalServerError(INTERNAL_ERROR_MESSAGE) from exc


@router.post("/refreshToken")
def refresh_tokens(
    payload: Optional[SessionTokensRequest] = None,
    db: Session = Depends(get_db),
) -> Response:
    """Report whether the access token is still valid, rotating the pair if not."""

    payload = payload or SessionTokensRequest()
    try:
        result = refresh_session(db, payload.access_token, payload.refresh_token)
    except MissingFieldError:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"stillValid": False})
    except (InvalidBearerTokenError, MalformedBearerTokenError):
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"stillValid": False})
    except Exception:
        logger.exception("Unexpected failure while refreshing a session")
        return Response(status_code=status.HTTP_401_UNAUTHORIZED)

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=result.model_dump(by_alias=True, exclude_none=True),
    )


@router.post("/logout")
def logout_session(
    payload: Optional[SessionTokensRequest] = None,
    db: Session = Depends(get_db),
) -> Response:
    """Invalidate the presented tokens. Always succeeds."""

    if payload is None:
        return Response(status_code=status.HTTP_200_OK)

    result = logout(db, payload.access_token, payload.refresh_token)
    if payload.access_token and not result.access_revoked:
        logger.warning("Logout left the presented access token untouched")
    if payload.refresh_token and not result.refresh_revoked:
        logger.warning("Logout left the presented refresh token untouched")
    return Response(status_code=status.HTTP_200_OK)


__all__ = ["limiter", "router"]
