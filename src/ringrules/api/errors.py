"""Shared error-handling utilities for API routes.

Provides a single ``http_exception`` helper so that every route module
produces the same standardized ``ErrorResponse`` payload with the
``X-Ringrules-Error: 1`` header, plus the mapping from domain errors to
HTTP status codes.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

from ringrules.api.schemas.errors import ErrorResponse
from ringrules.core.domain.errors import (
    CatalogError,
    ConfigError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    RingrulesError,
    ValidationError,
)

ERROR_HEADER = "X-Ringrules-Error"

_STATUS_BY_ERROR: tuple[tuple[type[RingrulesError], int], ...] = (
    (CatalogError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ConfigError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def http_exception(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> HTTPException:
    """Build a standardized HTTPException with ErrorResponse payload.

    Args:
        status_code: HTTP status code.
        code: Machine-readable error code (e.g. ``"not_found"``).
        message: Human-readable error description.
        details: Optional structured error details.

    Returns:
        HTTPException ready to be raised from a route handler.
    """
    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(code=code, message=message, details=details).model_dump(
            exclude_none=True
        ),
        headers={ERROR_HEADER: "1"},
    )


def status_for(error: RingrulesError) -> int:
    """HTTP status for a domain error; ``status_code`` on the error wins."""
    if error.status_code is not None:
        return error.status_code
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def from_domain_error(error: RingrulesError) -> HTTPException:
    """Translate a domain error into the standardized HTTPException."""
    return http_exception(
        status_code=status_for(error),
        code=error.code,
        message=error.message,
        details=error.details or None,
    )
