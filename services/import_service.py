"""
Batched reconciliation importer.

Upserts large row sets into the catalog store in fixed-size batches,
strictly one batch at a time. A failing batch is recorded and skipped;
it never aborts the run or rolls back earlier batches.
"""

import math
import time
from io import BytesIO
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, TypeVar, Union
import structlog

from pydantic import BaseModel

from config import settings
from exceptions import AppError, BatchPersistenceError, ImportFileError
from models.imports import FailedRow, ReconciliationResult
from parsers.catalog_parser import parse_catalog_file
from services.catalog_store import SupabaseCatalogStore, get_catalog_store

logger = structlog.get_logger(__name__)

T = TypeVar("T")

ProgressCallback = Callable[[int, int], None]
CancelCheck = Callable[[], bool]


def partition(rows: Sequence[T], batch_size: int) -> list[Sequence[T]]:
    """
    Split rows into contiguous batches; the last one may be short.

    Every row lands in exactly one batch and there are ceil(n / size)
    batches.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    return [rows[i:i + batch_size] for i in range(0, len(rows), batch_size)]


def batch_count(total: int, batch_size: int) -> int:
    return math.ceil(total / batch_size) if total else 0


def _to_store_row(row: Any) -> dict:
    if hasattr(row, "to_row"):
        return row.to_row()
    if isinstance(row, BaseModel):
        return row.model_dump()
    return dict(row)


def _row_key(row: Any, key: str) -> Any:
    if isinstance(row, dict):
        return row[key]
    return getattr(row, key)


def _failure_reason(error: Exception) -> str:
    """Human-readable reason; never the raw store error object."""
    if isinstance(error, AppError):
        return error.message
    return str(error) or type(error).__name__


class ImportService:
    """
    Reconciles canonical rows with the persisted catalog.

    Handles:
    - Batched, idempotent upsert keyed by the natural key
    - Insert/update classification before persisting
    - Per-batch error isolation and progress reporting
    - Clearing the catalog
    """

    def __init__(
        self,
        store: SupabaseCatalogStore,
        key: Optional[str] = None,
        batch_delay_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.key = key or getattr(store, "key", None) or settings.catalog_key
        self.batch_delay_seconds = (
            settings.import_batch_delay_seconds
            if batch_delay_seconds is None
            else batch_delay_seconds
        )
        self._sleep = sleep

    # ===================
    # IMPORT
    # ===================

    def import_records(
        self,
        rows: Sequence[Any],
        batch_size: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
        should_cancel: Optional[CancelCheck] = None,
    ) -> ReconciliationResult:
        """
        Upsert rows batch by batch.

        For each batch: look up which keys already exist, classify rows as
        insert or update, then issue one upsert for the whole batch. A
        failed batch contributes one error message and its rows to
        failed_rows.

        Args:
            rows: Rows carrying the natural key (models with to_row(),
                  pydantic models or dicts)
            batch_size: Rows per batch (default import_batch_size)
            on_progress: Called as on_progress(percent, processed) after
                         each committed batch, and once more at 100
            should_cancel: Polled before each batch; returning True stops
                           the run before the next batch starts

        Returns:
            ReconciliationResult
        """
        batch_size = batch_size or settings.import_batch_size
        batches = partition(rows, batch_size)
        total = len(rows)

        result = ReconciliationResult(total_rows=total, batch_count=len(batches))

        logger.info(
            "import_started",
            total=total,
            batch_size=batch_size,
            batches=len(batches)
        )

        seen = 0
        for index, batch in enumerate(batches):
            batch_number = index + 1

            if should_cancel is not None and should_cancel():
                result.cancelled = True
                logger.warning(
                    "import_cancelled",
                    before_batch=batch_number,
                    processed=result.processed_count
                )
                break

            if index > 0 and self.batch_delay_seconds > 0:
                self._sleep(self.batch_delay_seconds)

            seen += len(batch)

            try:
                inserted, updated = self._commit_batch(batch)
            except Exception as e:
                error = BatchPersistenceError(batch_number, _failure_reason(e))
                result.errors.append(error.message)
                result.failed_rows.extend(
                    FailedRow(row=row, reason=error.reason) for row in batch
                )
                logger.error(
                    "import_batch_failed",
                    batch=batch_number,
                    rows=len(batch),
                    error=error.reason
                )
                continue

            result.inserted_count += inserted
            result.updated_count += updated

            logger.debug(
                "import_batch_committed",
                batch=batch_number,
                inserted=inserted,
                updated=updated
            )

            if on_progress is not None:
                on_progress(round(seen / total * 100), result.processed_count)

        if on_progress is not None:
            on_progress(100, result.processed_count)

        logger.info(
            "import_complete",
            inserted=result.inserted_count,
            updated=result.updated_count,
            failed=len(result.failed_rows),
            cancelled=result.cancelled
        )

        return result

    def _commit_batch(self, batch: Sequence[Any]) -> tuple[int, int]:
        """Classify then upsert one batch. Returns (inserted, updated)."""
        keys = [_row_key(row, self.key) for row in batch]
        existing = self.store.select_existing(keys)

        updated = sum(1 for key in keys if key in existing)
        inserted = len(batch) - updated

        self.store.upsert([_to_store_row(row) for row in batch], on_conflict=self.key)

        return inserted, updated

    def import_file(
        self,
        file: Union[str, Path, BytesIO, bytes],
        filename: Optional[str] = None,
        batch_size: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
        should_cancel: Optional[CancelCheck] = None,
    ) -> ReconciliationResult:
        """
        Parse a catalog export and import its valid rows.

        Row-level problems become warnings. An unreadable file yields an
        unsuccessful result with zero rows and no batch is attempted.
        """
        logger.info("catalog_import_file", filename=filename)

        try:
            parsed = parse_catalog_file(file, filename)
        except ImportFileError as e:
            logger.error("catalog_import_unreadable", filename=filename, error=e.message)
            result = ReconciliationResult()
            result.errors.append(e.message)
            return result

        result = self.import_records(
            parsed.products,
            batch_size=batch_size,
            on_progress=on_progress,
            should_cancel=should_cancel,
        )
        result.warnings = parsed.warnings + result.warnings
        return result

    # ===================
    # DELETE
    # ===================

    def clear_all(self) -> None:
        """Delete the whole catalog in one unbatched call."""
        logger.info("clearing_catalog")
        self.store.delete_all()

    def delete_by_key(self, key: Any) -> None:
        self.store.delete_by_key(key)


# Singleton instance for convenience
_import_service: Optional[ImportService] = None


def get_import_service() -> ImportService:
    """Get or create ImportService instance."""
    global _import_service
    if _import_service is None:
        _import_service = ImportService(get_catalog_store())
    return _import_service
