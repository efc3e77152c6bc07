"""Application-level exception types.

This module defines domain errors used across services and the HTTP layer,
enabling consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep shapes consistent across the codebase
    without forcing every error to fill them in.
    """

    hint: str
    max_value: int
    actual_value: int
    resource: str
    resource_id: str
    limit: int
    remaining: int
    reset_at: int
    retry_after: int
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input validation fails."""


class AuthenticationAppError(AppError):
    """Raised when the caller has no valid session."""


class AuthorizationAppError(AppError):
    """Raised when an authenticated caller may not act on a resource."""


class NotFoundAppError(AppError):
    """Raised when a post or comment does not exist."""


class RateLimitAppError(AppError):
    """Raised when a client exhausted its request quota."""
