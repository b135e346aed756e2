"""
Editing session API routes.

A session holds one editable row collection with undo/redo, selection
and pending match suggestions.
"""

from datetime import datetime

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
import structlog

from exceptions import ValidationError
from models.record import EditableRow, RowPatch
from models.session import (
    SessionCreate,
    SessionResponse,
    PatchRowsRequest,
    RowIdsRequest,
    ReorderRequest,
    ClearRequest,
    SelectMatchRequest,
    SessionSuggestionsResponse,
)
from services.row_store import RowStore, get_row_store_registry
from services.matching_service import get_matching_service, select_match
from services.export_service import export_rows
from routes.common import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()


def _state(store: RowStore) -> SessionResponse:
    return SessionResponse(
        id=store.id,
        rows=store.rows,
        selected_ids=store.selected_ids,
        dirty=store.dirty,
        can_undo=store.can_undo,
        can_redo=store.can_redo,
    )


# ===================
# SESSION LIFECYCLE
# ===================

@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(data: SessionCreate):
    """Start an editing session seeded with rows."""
    try:
        store = get_row_store_registry().create(data.rows)
        return _state(store)
    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str):
    """
    Get session state.

    Raises:
        404: Session not found
    """
    try:
        return _state(get_row_store_registry().get(session_id))
    except Exception as e:
        return handle_error(e)


@router.delete("/{session_id}", status_code=204)
async def discard_session(session_id: str):
    """Drop a session and its history."""
    try:
        get_row_store_registry().discard(session_id)
        return None
    except Exception as e:
        return handle_error(e)


# ===================
# ROW EDITS
# ===================

@router.put("/{session_id}/rows", response_model=SessionResponse)
async def replace_rows(session_id: str, data: SessionCreate):
    """Replace all rows (undoable)."""
    try:
        store = get_row_store_registry().get(session_id)
        store.set_all(data.rows)
        return _state(store)
    except Exception as e:
        return handle_error(e)


@router.patch("/{session_id}/rows/{row_id}", response_model=EditableRow)
async def patch_row(session_id: str, row_id: str, data: RowPatch):
    """
    Update one row. Only provided fields are changed.

    Raises:
        404: Session or row not found
    """
    try:
        store = get_row_store_registry().get(session_id)
        return store.patch_one(row_id, data)
    except Exception as e:
        return handle_error(e)


@router.patch("/{session_id}/rows", response_model=SessionResponse)
async def patch_rows(session_id: str, data: PatchRowsRequest):
    """Apply the same update to several rows."""
    try:
        store = get_row_store_registry().get(session_id)
        store.patch_many(data.ids, data.patch)
        return _state(store)
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/rows/delete", response_model=SessionResponse)
async def delete_rows(session_id: str, data: RowIdsRequest):
    """Delete rows by id."""
    try:
        store = get_row_store_registry().get(session_id)
        store.delete_many(data.ids)
        return _state(store)
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/rows/duplicate", response_model=SessionResponse)
async def duplicate_rows(session_id: str, data: RowIdsRequest):
    """Append copies of rows."""
    try:
        store = get_row_store_registry().get(session_id)
        store.duplicate_rows(data.ids)
        return _state(store)
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/rows/reorder", response_model=SessionResponse)
async def reorder_rows(session_id: str, data: ReorderRequest):
    """Move one row and renumber positions."""
    try:
        store = get_row_store_registry().get(session_id)
        store.reorder_rows(data.start_index, data.end_index)
        return _state(store)
    except IndexError:
        return handle_error(ValidationError(
            f"Row index {data.start_index} out of range",
            details={"start_index": data.start_index}
        ))
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/clear", response_model=SessionResponse)
async def clear_rows(session_id: str, data: ClearRequest):
    """Remove all rows, or only the selected ones."""
    try:
        store = get_row_store_registry().get(session_id)
        store.clear(only_selected=data.only_selected)
        return _state(store)
    except Exception as e:
        return handle_error(e)


# ===================
# HISTORY
# ===================

@router.post("/{session_id}/undo", response_model=SessionResponse)
async def undo(session_id: str):
    """Restore the previous snapshot. No-op when history is empty."""
    try:
        store = get_row_store_registry().get(session_id)
        store.undo()
        return _state(store)
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/redo", response_model=SessionResponse)
async def redo(session_id: str):
    """Re-apply the last undone change. No-op when nothing to redo."""
    try:
        store = get_row_store_registry().get(session_id)
        store.redo()
        return _state(store)
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/saved", response_model=SessionResponse)
async def mark_saved(session_id: str):
    """Clear the dirty flag after the caller has saved."""
    try:
        store = get_row_store_registry().get(session_id)
        store.mark_clean()
        return _state(store)
    except Exception as e:
        return handle_error(e)


# ===================
# SELECTION
# ===================

@router.put("/{session_id}/selection", response_model=SessionResponse)
async def set_selection(session_id: str, data: RowIdsRequest):
    """Replace the selection."""
    try:
        store = get_row_store_registry().get(session_id)
        store.set_selected(data.ids)
        return _state(store)
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/selection/all", response_model=SessionResponse)
async def select_all(session_id: str):
    try:
        store = get_row_store_registry().get(session_id)
        store.select_all()
        return _state(store)
    except Exception as e:
        return handle_error(e)


@router.delete("/{session_id}/selection", response_model=SessionResponse)
async def deselect_all(session_id: str):
    try:
        store = get_row_store_registry().get(session_id)
        store.deselect_all()
        return _state(store)
    except Exception as e:
        return handle_error(e)


# ===================
# MATCHING
# ===================

@router.post("/{session_id}/suggest", response_model=SessionSuggestionsResponse)
async def suggest_for_session(session_id: str):
    """
    Compute catalog suggestions for every named row.

    Replaces the session's pending suggestions.
    """
    try:
        store = get_row_store_registry().get(session_id)
    except Exception as e:
        return handle_error(e)

    rows = store.rows
    try:
        suggestions = await run_in_threadpool(get_matching_service().suggest_for_rows, rows)
    except Exception as e:
        logger.error("session_suggest_failed", session_id=session_id, error=str(e))
        return SessionSuggestionsResponse(
            suggestions={},
            row_count=len(rows),
            matched_count=0,
            error="Не удалось найти совпадения",
        )

    store.suggestions = suggestions
    return SessionSuggestionsResponse(
        suggestions={
            row_id: [match.to_suggestion() for match in matches]
            for row_id, matches in suggestions.items()
        },
        row_count=len(rows),
        matched_count=len(suggestions),
    )


@router.post("/{session_id}/select-match", response_model=EditableRow)
async def apply_match(session_id: str, data: SelectMatchRequest):
    """
    Copy a chosen catalog entry onto a row (undoable).

    The row's pending suggestions are dropped.
    """
    try:
        store = get_row_store_registry().get(session_id)
        updated, remaining = select_match(store.get(data.row_id), data.entry, store.suggestions)
        saved = store.replace_row(updated)
        store.suggestions = remaining
        logger.info("match_selected", session_id=session_id, row_id=data.row_id, entry_id=data.entry.id)
        return saved
    except Exception as e:
        return handle_error(e)


# ===================
# EXPORT
# ===================

@router.get("/{session_id}/export")
async def export_session(session_id: str):
    """Download session rows as Excel."""
    try:
        store = get_row_store_registry().get(session_id)
        output = export_rows(store.rows)
        filename = f"materials_{datetime.now().strftime('%Y%m%d_%H%M')}.xlsx"
        return StreamingResponse(
            output,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f"attachment; filename={filename}"}
        )
    except Exception as e:
        return handle_error(e)
