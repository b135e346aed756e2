"""
Excel parser for specification uploads.

Reads the first sheet of an equipment/material specification, maps its
headers onto the canonical schema and coerces every row.
"""

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Optional, Union
import structlog

import pandas as pd

from config.column_mapping import ALIAS_TABLES
from exceptions import ImportFileError
from models.record import CanonicalRecord
from parsers.column_mapper import ColumnMapping, build_mapping
from parsers.record_coercer import coerce_rows
from parsers.table import TableData, read_table

logger = structlog.get_logger(__name__)


@dataclass
class SpecificationParseResult:
    """Result of parsing a specification file."""
    records: list[CanonicalRecord] = field(default_factory=list)
    mapping: ColumnMapping = field(default_factory=ColumnMapping)
    warnings: list[str] = field(default_factory=list)
    dropped: int = 0

    @property
    def has_data(self) -> bool:
        return len(self.records) > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "records": [r.model_dump() for r in self.records],
            **self.mapping.to_dict(),
            "warnings": list(self.warnings),
            "dropped": self.dropped,
        }


def read_excel_table(file: Union[str, Path, BytesIO, bytes]) -> TableData:
    """
    Read the first sheet of an Excel workbook.

    Every cell comes back as a string; empty cells are "".

    Raises:
        ImportFileError: If the workbook cannot be read
    """
    logger.info("parsing_excel", file_type=type(file).__name__)

    if isinstance(file, bytes):
        file = BytesIO(file)

    try:
        df = pd.read_excel(
            file,
            sheet_name=0,
            dtype=str,
            na_filter=False,
            engine="openpyxl",
        )
    except Exception as e:
        logger.error("excel_read_failed", error=str(e))
        raise ImportFileError(
            message="Failed to read Excel file",
            details={"original_error": str(e)}
        )

    headers = [str(col) for col in df.columns]
    df = df.fillna("")
    df.columns = headers

    # Drop fully empty rows left over from formatting
    df = df[(df != "").any(axis=1)]

    return TableData(headers=headers, rows=df.to_dict(orient="records"))


def parse_specification(
    file: Union[str, Path, BytesIO, bytes],
    filename: Optional[str] = None,
    schema: str = "material",
    default_name: Optional[str] = None,
) -> SpecificationParseResult:
    """
    Parse an equipment or material specification.

    Args:
        file: File path, raw bytes or file-like object
        filename: Original file name, used to pick the CSV or Excel reader
        schema: Alias table to use ("material", "equipment" or "product")
        default_name: Name for rows without one; when omitted they are dropped

    Returns:
        SpecificationParseResult with coerced records and mapping diagnostics

    Raises:
        ImportFileError: If the file cannot be read or has no rows
        ValueError: If the schema is unknown
    """
    if schema not in ALIAS_TABLES:
        raise ValueError(f"Unknown import schema: {schema}")

    table = read_table(file, filename)

    if not table.has_data:
        raise ImportFileError(message="File contains no data")

    mapping = build_mapping(table.headers, ALIAS_TABLES[schema])
    coerced = coerce_rows(table.rows, mapping, default_name=default_name)

    result = SpecificationParseResult(
        records=coerced.records,
        mapping=mapping,
        warnings=table.warnings + coerced.warnings,
        dropped=coerced.dropped,
    )

    if mapping.unmapped:
        logger.info("unmapped_headers", headers=list(mapping.unmapped))

    logger.info(
        "specification_parsed",
        schema=schema,
        records=len(result.records),
        dropped=result.dropped,
        warnings=len(result.warnings)
    )

    return result
