"""
Base exception classes for application-wide error handling.

Every domain error raised by a service derives from BaseApplicationError so
that views can render a consistent payload and pick an HTTP status without
knowing the concrete exception type.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Invalid input or rejected business rule
    ├── NotFoundError - Resource not found
    ├── PermissionDeniedError - Authorization failures
    └── ConflictError - State conflicts (locks, non-empty funds, duplicates)

Usage:
    from core.exceptions import NotFoundError, ValidationError

    raise ValidationError("Amount must be positive", error_code="INVALID_AMOUNT")

    raise NotFoundError(
        f"Project {project_id} not found",
        error_code="PROJECT_NOT_FOUND",
        details={"project_id": project_id},
    )

    # In a view
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.http_status)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (amounts, ids, field errors)
        http_status: Status code used when the error reaches an API view
    """

    default_error_code: str = "APPLICATION_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Project fund has insufficient balance",
                "error_code": "INSUFFICIENT_FUNDS",
                "details": {"available": 200000, "required": 250000}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails in the service layer.

    DRF serializers handle request shape; this covers rules that need the
    database, such as an installment larger than what is still owed.
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """Raised when a requested resource does not exist."""

    default_error_code: str = "NOT_FOUND"
    http_status: int = 404


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when a user lacks permission for an operation.

    Authentication failures (missing or invalid token) stay with DRF's
    AuthenticationFailed; this is for role and project-scope denials.
    """

    default_error_code: str = "PERMISSION_DENIED"
    http_status: int = 403


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Use for:
    - Deleting a project whose fund still holds money
    - Lock contention between workers
    - Unique constraint races
    """

    default_error_code: str = "CONFLICT"
    http_status: int = 409
