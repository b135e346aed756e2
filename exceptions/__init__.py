"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    DatabaseError,

    # Import
    ImportFileError,
    RowParseError,
    RowValidationError,
    BatchPersistenceError,

    # Editing
    RowNotFoundError,
    SessionNotFoundError,

    # Catalog
    CatalogEntryNotFoundError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "DatabaseError",

    # Import
    "ImportFileError",
    "RowParseError",
    "RowValidationError",
    "BatchPersistenceError",

    # Editing
    "RowNotFoundError",
    "SessionNotFoundError",

    # Catalog
    "CatalogEntryNotFoundError",
]
