"""
Editable row collection with bounded undo/redo.

Every mutation that changes rows snapshots the pre-mutation rows onto a
capped history stack and clears the redo stack. Snapshots and reads are
deep copies, so rows in history or in a caller's hands never alias the
live collection.
"""

import threading
from collections import deque
from typing import Iterable, Optional
from uuid import uuid4
import structlog

from config import settings
from exceptions import RowNotFoundError, SessionNotFoundError
from models.record import CanonicalRecord, EditableRow, RowPatch, utc_now

logger = structlog.get_logger(__name__)

Snapshot = tuple[EditableRow, ...]


def _snapshot(rows: Iterable[EditableRow]) -> Snapshot:
    return tuple(row.model_copy(deep=True) for row in rows)


def _changes(patch: RowPatch | dict) -> dict:
    if not isinstance(patch, RowPatch):
        patch = RowPatch.model_validate(patch)
    return patch.changes()


def _as_editable(rows: Iterable[EditableRow | CanonicalRecord]) -> list[EditableRow]:
    return [
        row.model_copy(deep=True) if isinstance(row, EditableRow)
        else EditableRow.from_record(row)
        for row in rows
    ]


class RowStore:
    """
    Owned editing state for one collection.

    Lifecycle: created empty, mutated, then discarded. One writer at a
    time; mutations are serialized by a per-store lock.
    """

    def __init__(self, history_limit: Optional[int] = None, store_id: Optional[str] = None):
        self.id = store_id or str(uuid4())
        self.history_limit = history_limit or settings.history_limit
        self._rows: list[EditableRow] = []
        self._history: deque[Snapshot] = deque(maxlen=self.history_limit)
        self._future: list[Snapshot] = []
        self._selected: list[str] = []
        self.dirty = False
        # Pending match suggestions by row id; not part of undo history
        self.suggestions: dict[str, list] = {}
        self._lock = threading.RLock()

    # ===================
    # READ
    # ===================

    @property
    def rows(self) -> list[EditableRow]:
        """Deep copies of the current rows; edit through the mutation methods."""
        return list(_snapshot(self._rows))

    @property
    def selected_ids(self) -> list[str]:
        return list(self._selected)

    @property
    def can_undo(self) -> bool:
        return len(self._history) > 0

    @property
    def can_redo(self) -> bool:
        return len(self._future) > 0

    @property
    def history_size(self) -> int:
        return len(self._history)

    def get(self, row_id: str) -> EditableRow:
        for row in self._rows:
            if row.id == row_id:
                return row.model_copy(deep=True)
        raise RowNotFoundError(row_id)

    # ===================
    # MUTATIONS
    # ===================

    def _commit(self, rows: list[EditableRow]) -> None:
        """Record the current rows in history and install new ones."""
        self._history.append(_snapshot(self._rows))
        self._future.clear()
        self._rows = rows
        self.dirty = True

    def load(self, rows: Iterable[EditableRow | CanonicalRecord]) -> None:
        """Seed the collection without recording history; leaves the store clean."""
        with self._lock:
            self._rows = _as_editable(rows)
            self._history.clear()
            self._future.clear()
            self._selected = []
            self.suggestions = {}
            self.dirty = False

    def set_all(self, rows: Iterable[EditableRow | CanonicalRecord]) -> None:
        """Replace the whole collection (e.g. after a file import)."""
        with self._lock:
            new_rows = _as_editable(rows)
            self._commit(new_rows)
            self._selected = [sid for sid in self._selected if any(r.id == sid for r in new_rows)]
            logger.debug("rows_set", store=self.id, count=len(new_rows))

    def patch_one(self, row_id: str, patch: RowPatch | dict) -> EditableRow:
        """
        Apply a partial update to one row.

        Raises:
            RowNotFoundError: If no row has this id
        """
        changes = _changes(patch)
        with self._lock:
            index = self._index_of(row_id)
            updated = self._rows[index].model_copy(update={**changes, "updated_at": utc_now()})
            new_rows = list(self._rows)
            new_rows[index] = updated
            self._commit(new_rows)
            logger.debug("row_patched", store=self.id, row_id=row_id, fields=list(changes))
            return updated.model_copy(deep=True)

    def patch_many(self, ids: Iterable[str], patch: RowPatch | dict) -> int:
        """
        Apply the same partial update to several rows.

        Unknown ids are ignored. Returns the number of rows changed.
        """
        changes = _changes(patch)
        targets = set(ids)
        with self._lock:
            now = utc_now()
            changed = 0
            new_rows = []
            for row in self._rows:
                if row.id in targets:
                    row = row.model_copy(update={**changes, "updated_at": now})
                    changed += 1
                new_rows.append(row)
            if not changed:
                return 0
            self._commit(new_rows)
            logger.debug("rows_patched", store=self.id, count=changed, fields=list(changes))
            return changed

    def replace_row(self, row: EditableRow) -> EditableRow:
        """Swap in a modified copy of an existing row (same id)."""
        with self._lock:
            index = self._index_of(row.id)
            updated = row.model_copy(update={"updated_at": utc_now()})
            new_rows = list(self._rows)
            new_rows[index] = updated
            self._commit(new_rows)
            return updated.model_copy(deep=True)

    def delete_many(self, ids: Iterable[str]) -> int:
        """Remove rows by id. Returns the number removed."""
        targets = set(ids)
        with self._lock:
            new_rows = [row for row in self._rows if row.id not in targets]
            removed = len(self._rows) - len(new_rows)
            if not removed:
                return 0
            self._commit(new_rows)
            self._selected = [sid for sid in self._selected if sid not in targets]
            logger.debug("rows_deleted", store=self.id, count=removed)
            return removed

    def duplicate_rows(self, ids: Iterable[str]) -> list[EditableRow]:
        """Append copies of the given rows with fresh ids and positions."""
        targets = set(ids)
        with self._lock:
            now = utc_now()
            copies = []
            for row in self._rows:
                if row.id in targets:
                    copies.append(row.model_copy(update={
                        "id": str(uuid4()),
                        "position": len(self._rows) + len(copies) + 1,
                        "created_at": now,
                        "updated_at": now,
                    }))
            if not copies:
                return []
            self._commit(self._rows + copies)
            return list(_snapshot(copies))

    def reorder_rows(self, start_index: int, end_index: int) -> None:
        """
        Move the row at start_index to end_index and renumber positions.

        Raises:
            IndexError: If start_index is out of range
        """
        with self._lock:
            new_rows = list(self._rows)
            moved = new_rows.pop(start_index)
            new_rows.insert(end_index, moved)
            now = utc_now()
            new_rows = [
                row if row.position == i + 1
                else row.model_copy(update={"position": i + 1, "updated_at": now})
                for i, row in enumerate(new_rows)
            ]
            if all(new is old for new, old in zip(new_rows, self._rows)):
                return
            self._commit(new_rows)

    def clear(self, only_selected: bool = False) -> int:
        """
        Remove all rows, or only the selected ones.

        Selection is reset either way. Returns the number removed.
        """
        with self._lock:
            if only_selected:
                selected = set(self._selected)
                new_rows = [row for row in self._rows if row.id not in selected]
            else:
                new_rows = []
            removed = len(self._rows) - len(new_rows)
            self._selected = []
            if not removed:
                return 0
            self._commit(new_rows)
            logger.debug("rows_cleared", store=self.id, count=removed, only_selected=only_selected)
            return removed

    # ===================
    # UNDO / REDO
    # ===================

    def undo(self) -> bool:
        """
        Restore the most recent snapshot.

        The current rows go onto the redo stack. Returns False when there
        is nothing to undo.
        """
        with self._lock:
            if not self._history:
                return False
            self._future.insert(0, _snapshot(self._rows))
            self._rows = list(self._history.pop())
            self.dirty = True
            return True

    def redo(self) -> bool:
        """Mirror of undo. Returns False when there is nothing to redo."""
        with self._lock:
            if not self._future:
                return False
            self._history.append(_snapshot(self._rows))
            self._rows = list(self._future.pop(0))
            self.dirty = True
            return True

    def mark_clean(self) -> None:
        """Clear the dirty flag after a successful save."""
        self.dirty = False

    # ===================
    # SELECTION
    # ===================

    def set_selected(self, ids: Iterable[str]) -> None:
        self._selected = list(dict.fromkeys(ids))

    def toggle_selected(self, row_id: str) -> None:
        if row_id in self._selected:
            self._selected.remove(row_id)
        else:
            self._selected.append(row_id)

    def select_all(self) -> None:
        self._selected = [row.id for row in self._rows]

    def deselect_all(self) -> None:
        self._selected = []

    def _index_of(self, row_id: str) -> int:
        for index, row in enumerate(self._rows):
            if row.id == row_id:
                return index
        raise RowNotFoundError(row_id)


class RowStoreRegistry:
    """One RowStore per editing session."""

    def __init__(self, history_limit: Optional[int] = None):
        self.history_limit = history_limit
        self._stores: dict[str, RowStore] = {}
        self._lock = threading.Lock()

    def create(self, rows: Iterable[CanonicalRecord] = ()) -> RowStore:
        store = RowStore(history_limit=self.history_limit)
        rows = list(rows)
        store.load(rows)
        with self._lock:
            self._stores[store.id] = store
        logger.info("session_created", session_id=store.id, rows=len(rows))
        return store

    def get(self, session_id: str) -> RowStore:
        with self._lock:
            store = self._stores.get(session_id)
        if store is None:
            raise SessionNotFoundError(session_id)
        return store

    def discard(self, session_id: str) -> None:
        with self._lock:
            if self._stores.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)
        logger.info("session_discarded", session_id=session_id)


_registry: Optional[RowStoreRegistry] = None


def get_row_store_registry() -> RowStoreRegistry:
    """Get or create the session registry."""
    global _registry
    if _registry is None:
        _registry = RowStoreRegistry()
    return _registry
