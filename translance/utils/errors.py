"""Utility helpers for standardized error responses."""
from typing import Any

from fastapi import HTTPException, status


def error_response(code: str, message: str, details: Any | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"error": message, "code": code}
    if details:
        payload["details"] = details
    return payload


def validation_error(code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_response(code, message))


def auth_error(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=error_response(code, message),
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden(code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_response(code, message))


def not_found(code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_response(code, message))


def conflict(code: str, message: str) -> HTTPException:
    """State-precondition violations are reported as 400, like validation errors."""

    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_response(code, message))


__all__ = [
    "error_response",
    "validation_error",
    "auth_error",
    "forbidden",
    "not_found",
    "conflict",
]
