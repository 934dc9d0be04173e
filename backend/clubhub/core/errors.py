"""Domain errors raised by services and mapped to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class ClubHubError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    detail: str = "error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class NotFoundError(ClubHubError):
    """Missing entity."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Not found"


class ValidationError(ClubHubError):
    """Bad input or an invalid state transition."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid request"


class ForbiddenError(ClubHubError):
    """Authorization failure."""

    status_code = status.HTTP_403_FORBIDDEN
    detail = "Forbidden"


class ConflictError(ClubHubError):
    """Uniqueness violation."""

    status_code = status.HTTP_409_CONFLICT
    detail = "Conflict"


class UnauthorizedError(ClubHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Not authenticated"


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ClubHubError)
    async def clubhub_error_handler(request: Request, exc: ClubHubError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        # unique/foreign-key violations not already mapped by a service
        logger.warning("integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": "Conflicting data"})
