# ruff: noqa: D107
"""Chat and persistence exceptions."""

from typing import Any

from .base import BaseAppException, NotFoundError


class ChatNotFoundError(NotFoundError):
    """Raised when a referenced chat does not exist."""

    def __init__(
        self,
        message: str = "Chat not found",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, error_code="CHAT_NOT_FOUND", details=details)


class StoreError(BaseAppException):
    """Raised when the database rejects or fails an operation."""

    def __init__(
        self,
        message: str = "Database operation failed",
        operation: str | None = None,
        status_code: int = 500,
        error_code: str = "STORE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.operation = operation
        details = dict(details or {})
        if operation:
            details.setdefault("operation", operation)
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details,
        )


class StoreConstraintError(StoreError):
    """Raised when a write violates a database constraint (e.g. a dangling foreign key)."""

    def __init__(
        self,
        message: str = "Database constraint violated",
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            operation=operation,
            status_code=409,
            error_code="STORE_CONSTRAINT_VIOLATION",
            details=details,
        )


class OperationTimeoutError(BaseAppException):
    """Raised when a database operation exceeds its time budget.

    Distinct from ``StoreError`` so callers can tell a timeout from a store fault.
    """

    def __init__(
        self,
        message: str = "Database operation timed out",
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.operation = operation
        details = dict(details or {})
        if operation:
            details.setdefault("operation", operation)
        super().__init__(
            message=message,
            status_code=504,
            error_code="OPERATION_TIMEOUT",
            details=details,
        )
