"""
carehub/errors.py — Domain error taxonomy.

Services raise these; the API layer maps each one to a status code and a
JSON body of the form {"error": ..., "details": [...]}.
"""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for every error that is safe to show to a client."""

    status_code: int = 500

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(AppError):
    status_code = 400


class UnauthorizedError(AppError):
    status_code = 401


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Duplicate value for a unique field (facility name, medicine name, email)."""

    status_code = 400


class InvalidTransitionError(AppError):
    status_code = 400

    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(f"Invalid status transition from {from_status} to {to_status}")
        self.from_status = from_status
        self.to_status = to_status
