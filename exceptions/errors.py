"""
Custom exception classes for the application.

Row- and batch-level errors are collected into import results rather than
raised to the caller; only ImportFileError aborts an import run.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "ROW_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# IMPORT ERRORS
# ===================

class ImportFileError(ValidationError):
    """Import file could not be read at all."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="IMPORT_FILE_UNREADABLE",
            message=message,
            details=details
        )


class RowParseError(ValidationError):
    """A single row is malformed (e.g. wrong column count)."""

    def __init__(self, row: int, message: str):
        self.row = row
        super().__init__(
            code="ROW_PARSE_ERROR",
            message=f"Row {row}: {message}",
            details={"row": row}
        )


class RowValidationError(ValidationError):
    """A single row is missing a required field after coercion."""

    def __init__(self, row: int, field: str, message: str):
        self.row = row
        self.field = field
        super().__init__(
            code="ROW_VALIDATION_ERROR",
            message=f"Row {row}: {message}",
            details={"row": row, "field": field}
        )


class BatchPersistenceError(AppError):
    """The store rejected a whole import batch."""

    def __init__(self, batch_number: int, reason: str):
        self.batch_number = batch_number
        self.reason = reason
        super().__init__(
            code="BATCH_PERSISTENCE_FAILED",
            message=f"batch {batch_number}: {reason}",
            status_code=500,
            details={"batch": batch_number}
        )


# ===================
# EDITING ERRORS
# ===================

class RowNotFoundError(NotFoundError):
    """Editable row not found."""

    def __init__(self, row_id: str):
        super().__init__(
            resource="Row",
            identifier=row_id,
            code="ROW_NOT_FOUND"
        )


class SessionNotFoundError(NotFoundError):
    """Editing session not found."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Session",
            identifier=session_id,
            code="SESSION_NOT_FOUND"
        )


# ===================
# CATALOG ERRORS
# ===================

class CatalogEntryNotFoundError(NotFoundError):
    """Catalog entry not found."""

    def __init__(self, entry_id: str):
        super().__init__(
            resource="Catalog entry",
            identifier=entry_id,
            code="CATALOG_ENTRY_NOT_FOUND"
        )
