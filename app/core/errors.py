"""API error classes and the handler that renders them.

Every error body has the shape ``{"error": <message>}``. An error raised
without a message is rendered as an empty body with the error's status code.
"""

from __future__ import annotations

from fastapi import Request, Response
from fastapi.responses import JSONResponse


class APIError(Exception):
    """Base class for errors translated directly into HTTP responses."""

    status_code: int = 500

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message


class BadRequestError(APIError):
    """Missing or malformed input (400)."""

    status_code = 400


class UnauthorizedError(APIError):
    """Bad credentials, bad signature or ownership mismatch (401)."""

    status_code = 401


class TokenExpiredError(UnauthorizedError):
    """Credential is no longer usable because of its time window or revocation (401)."""


class ForbiddenError(APIError):
    """Authenticated, but not allowed to touch the resource (403)."""

    status_code = 403


class NotFoundError(APIError):
    """Resource does not exist (404)."""

    status_code = 404


class ConflictError(APIError):
    """Duplicate unique field (409)."""

    status_code = 409


class InternalServerError(APIError):
    """Store, delivery or storage failure (500)."""

    status_code = 500


async def api_error_handler(request: Request, exc: APIError) -> Response:
    if exc.message is None:
        return Response(status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


__all__ = [
    "APIError",
    "BadRequestError",
    "ConflictError",
    "ForbiddenError",
    "InternalServerError",
    "NotFoundError",
    "TokenExpiredError",
    "UnauthorizedError",
    "api_error_handler",
]
