"""
CSV reader.

Reads a delimited export into header → cell rows. Quoted fields may hold
commas, newlines and doubled quotes.
"""

from io import BytesIO, StringIO
from pathlib import Path
from typing import Union
import structlog

import pandas as pd

from exceptions import ImportFileError
from parsers.table import TableData

logger = structlog.get_logger(__name__)


def read_csv_table(
    file: Union[str, Path, BytesIO, bytes],
    delimiter: str = ",",
) -> TableData:
    """
    Read a CSV file into a TableData.

    Lines with more fields than the header are skipped and reported as
    parse warnings; blank lines are ignored.

    Args:
        file: File path, raw bytes or file-like object
        delimiter: Field separator

    Returns:
        TableData with string cells ("" for empty)

    Raises:
        ImportFileError: If the file cannot be read or has no header
    """
    logger.info("parsing_csv", file_type=type(file).__name__)

    if isinstance(file, bytes):
        file = BytesIO(file)

    bad_lines: list[list[str]] = []

    def _on_bad_line(fields: list[str]) -> None:
        bad_lines.append(fields)
        return None

    try:
        df = pd.read_csv(
            file,
            sep=delimiter,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
            engine="python",
            on_bad_lines=_on_bad_line,
        )
    except pd.errors.EmptyDataError as e:
        logger.error("csv_empty", error=str(e))
        raise ImportFileError(message="CSV file is empty")
    except Exception as e:
        logger.error("csv_read_failed", error=str(e))
        raise ImportFileError(
            message="Failed to read CSV file",
            details={"original_error": str(e)}
        )

    headers = [str(col) for col in df.columns]
    df = df.fillna("")
    df.columns = headers

    warnings = [
        f"Skipped line with {len(fields)} columns (expected {len(headers)})"
        for fields in bad_lines
    ]

    table = TableData(
        headers=headers,
        rows=df.to_dict(orient="records"),
        warnings=warnings,
    )

    logger.info(
        "csv_parsed",
        rows=len(table.rows),
        columns=len(headers),
        skipped_lines=len(bad_lines)
    )

    return table
