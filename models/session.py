"""
Editing session request/response schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional

from models.base import BaseSchema
from models.matching import CatalogEntry, SuggestionResponse
from models.record import CanonicalRecord, EditableRow, RowPatch


class SessionCreate(BaseSchema):
    """Start an editing session, optionally seeded with rows."""

    rows: list[CanonicalRecord] = Field(default_factory=list)


class SessionResponse(BaseModel):
    """Current state of an editing session."""

    id: str
    rows: list[EditableRow]
    selected_ids: list[str]
    dirty: bool
    can_undo: bool
    can_redo: bool


class PatchRowsRequest(BaseSchema):
    """Apply the same patch to several rows."""

    ids: list[str] = Field(..., min_length=1)
    patch: RowPatch


class RowIdsRequest(BaseSchema):
    """A set of row ids (delete, duplicate, select)."""

    ids: list[str] = Field(default_factory=list)


class ReorderRequest(BaseSchema):
    """Move one row to a new position."""

    start_index: int = Field(..., ge=0)
    end_index: int = Field(..., ge=0)


class ClearRequest(BaseSchema):
    """Clear all rows or only the selected ones."""

    only_selected: bool = False


class SelectMatchRequest(BaseSchema):
    """Apply a catalog suggestion to a row."""

    row_id: str
    entry: CatalogEntry


class SessionSuggestionsResponse(BaseModel):
    """Pending suggestions keyed by row id."""

    suggestions: dict[str, list[SuggestionResponse]]
    row_count: int
    matched_count: int
    error: Optional[str] = None
