"""
Tabular file reading shared by the import parsers.
"""

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Any, Optional, Union

CSV_EXTENSIONS = (".csv", ".txt")


@dataclass
class TableData:
    """Headers plus ordered header → cell rows of one sheet."""
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return len(self.rows) > 0


def is_csv(filename: Optional[str]) -> bool:
    return bool(filename) and filename.lower().endswith(CSV_EXTENSIONS)


def read_table(
    file: Union[str, Path, BytesIO, bytes],
    filename: Optional[str] = None,
) -> TableData:
    """
    Read a spreadsheet or CSV file, picking the reader by file name.

    Args:
        file: File path, raw bytes or file-like object
        filename: Original file name (defaults to the path when file is one)

    Returns:
        TableData of the first sheet

    Raises:
        ImportFileError: If the file cannot be read
    """
    # Imported here: both readers depend on TableData
    from parsers.csv_parser import read_csv_table
    from parsers.excel_parser import read_excel_table

    if filename is None and isinstance(file, (str, Path)):
        filename = str(file)

    if is_csv(filename):
        return read_csv_table(file)
    return read_excel_table(file)
