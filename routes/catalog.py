"""
Catalog API routes.

Price-list import (batched upsert), clearing and counting.
"""

from io import BytesIO
from typing import Optional

from fastapi import APIRouter, Query, UploadFile, File
from fastapi.concurrency import run_in_threadpool
import structlog

from config import settings
from models.imports import ImportResponse, ClearResponse
from services.import_service import get_import_service
from services.catalog_store import get_catalog_store
from routes.common import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/import", response_model=ImportResponse)
async def import_catalog(
    file: UploadFile = File(...),
    batch_size: Optional[int] = Query(None, ge=1, le=10000, description="Rows per upsert batch")
):
    """
    Import a price-list export (CSV or Excel).

    Rows are upserted by catalog id in batches. Invalid rows are skipped
    and reported as warnings; a failed batch is reported and the rest of
    the file is still imported.
    """
    logger.info(
        "catalog_upload_started",
        filename=file.filename,
        content_type=file.content_type
    )

    try:
        content = await file.read()
        service = get_import_service()
        # Batches sleep between upserts; keep them off the event loop
        result = await run_in_threadpool(
            service.import_file,
            BytesIO(content),
            filename=file.filename,
            batch_size=batch_size
        )
        return result.to_response(max_messages=settings.import_max_messages)

    except Exception as e:
        return handle_error(e)


@router.delete("", response_model=ClearResponse)
async def clear_catalog():
    """Delete every catalog row."""
    try:
        get_import_service().clear_all()
        return ClearResponse(success=True)
    except Exception as e:
        logger.error("clear_catalog_failed", error=str(e))
        return ClearResponse(success=False, error=getattr(e, "message", str(e)))


@router.delete("/{entry_id}", response_model=ClearResponse)
async def delete_catalog_entry(entry_id: int):
    """Delete one catalog row by id."""
    try:
        get_import_service().delete_by_key(entry_id)
        return ClearResponse(success=True)
    except Exception as e:
        return handle_error(e)


@router.get("/count")
async def count_catalog():
    """Number of catalog rows."""
    try:
        return {"count": get_catalog_store().count()}
    except Exception as e:
        return handle_error(e)
