"""
Specification upload routes.

Parses equipment/material spreadsheets into canonical records without
persisting them.
"""

from io import BytesIO

from fastapi import APIRouter, Query, UploadFile, File
import structlog

from exceptions import ValidationError
from models.imports import ParsedMaterialsResponse
from parsers.excel_parser import parse_specification
from routes.common import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/parse", response_model=ParsedMaterialsResponse)
async def parse_materials(
    file: UploadFile = File(...),
    schema: str = Query("material", pattern="^(material|equipment)$", description="Header alias table")
):
    """
    Parse a specification file.

    Returns coerced rows plus the header mapping and unmapped headers.

    Raises:
        422: File unreadable or empty
    """
    logger.info("specification_upload_started", filename=file.filename, schema=schema)

    try:
        content = await file.read()
        if not content:
            raise ValidationError("Uploaded file is empty")

        result = parse_specification(BytesIO(content), filename=file.filename, schema=schema)

        return ParsedMaterialsResponse(
            records=result.records,
            mapping=dict(result.mapping.mapping),
            unmapped=list(result.mapping.unmapped),
            warnings=result.warnings,
            dropped=result.dropped,
        )

    except Exception as e:
        return handle_error(e)
