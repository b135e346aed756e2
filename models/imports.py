"""
Import run results and API response schemas.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, Field

from models.base import BaseSchema
from models.record import CanonicalRecord


@dataclass
class FailedRow:
    """A row that did not reach the store, with the reason."""
    row: Any
    reason: str


@dataclass
class ReconciliationResult:
    """
    Aggregate of one import run across all batches.

    For a completed run inserted + updated + failed == total_rows.
    A cancelled run only accounts for the batches it processed.
    """
    total_rows: int = 0
    inserted_count: int = 0
    updated_count: int = 0
    failed_rows: list[FailedRow] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    batch_count: int = 0
    cancelled: bool = False

    @property
    def processed_count(self) -> int:
        return self.inserted_count + self.updated_count

    @property
    def success(self) -> bool:
        """True if every batch was committed."""
        return not self.errors and not self.cancelled

    def to_response(self, max_messages: Optional[int] = None) -> "ImportResponse":
        """Convert to the caller-facing surface with bounded messages."""
        errors = self.errors if max_messages is None else self.errors[:max_messages]
        warnings = self.warnings if max_messages is None else self.warnings[:max_messages]
        return ImportResponse(
            success=self.success,
            imported=self.inserted_count,
            updated=self.updated_count,
            failed=len(self.failed_rows),
            total=self.total_rows,
            cancelled=self.cancelled,
            errors=errors,
            warnings=warnings,
        )


class ImportResponse(BaseModel):
    """Import result returned to the caller."""

    success: bool
    imported: int = 0
    updated: int = 0
    failed: int = 0
    total: int = 0
    cancelled: bool = False
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ClearResponse(BaseModel):
    """Result of a catalog delete."""

    success: bool
    error: Optional[str] = None


class ParsedMaterialsResponse(BaseSchema):
    """Coerced rows from an uploaded specification file."""

    records: list[CanonicalRecord]
    mapping: dict[str, str]
    unmapped: list[str]
    warnings: list[str] = Field(default_factory=list)
    dropped: int = 0
