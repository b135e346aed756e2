"""
Price-list catalog parser.

Validates catalog export rows into CatalogProduct records. Only the id
column is required; every other field falls back to the table defaults.
"""

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Any, Mapping, Optional, Union
import structlog

from config.column_mapping import PRODUCT_COLUMN_ALIASES
from exceptions import ImportFileError, RowParseError, RowValidationError
from models.catalog import (
    CatalogProduct,
    DEFAULT_PRODUCT_NAME,
    DEFAULT_BRAND,
    DEFAULT_BRAND_CODE,
    DEFAULT_CLASS,
    DEFAULT_CLASS_CODE,
)
from parsers.column_mapper import ColumnMapping, build_mapping
from parsers.record_coercer import coerce_fields, coerce_int
from parsers.table import read_table

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("id",)


@dataclass
class CatalogParseResult:
    """Validated catalog rows plus per-row warnings."""
    products: list[CatalogProduct] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    total: int = 0

    @property
    def success(self) -> bool:
        return len(self.warnings) == 0


def class_code_from_text(text: str) -> int:
    """
    Fold a non-numeric class code into a positive 32-bit integer.

    Uses the classic "h * 31 + c" string hash seeded with 1, so the same
    label always lands on the same code.
    """
    code = 1
    for char in text:
        code = ((code << 5) - code + ord(char)) & 0xFFFFFFFF
    if code >= 2 ** 31:
        code -= 2 ** 32
    return abs(code) or 1


def validate_product_row(
    raw_row: Mapping[str, Any],
    mapping: ColumnMapping,
    row_number: int,
) -> CatalogProduct:
    """
    Validate one catalog row.

    Args:
        raw_row: Header → cell value
        mapping: Column mapping built from PRODUCT_COLUMN_ALIASES
        row_number: Row number in the file (header is row 1)

    Returns:
        CatalogProduct

    Raises:
        RowValidationError: If the id is missing, non-numeric or not positive
    """
    values, _ = coerce_fields(raw_row, mapping)

    raw_id = values.get("id")
    product_id, ok = coerce_int(raw_id)
    if not ok or product_id is None or product_id <= 0:
        raise RowValidationError(
            row=row_number,
            field="id",
            message=f'invalid id "{raw_id or ""}" (must be a positive integer)'
        )

    class_code = DEFAULT_CLASS_CODE
    class_code_text = values.get("class_code")
    if class_code_text:
        parsed, ok = coerce_int(class_code_text)
        if ok and parsed is not None:
            class_code = parsed
        else:
            class_code = class_code_from_text(class_code_text)
            logger.debug(
                "class_code_hashed",
                row=row_number,
                value=class_code_text,
                class_code=class_code
            )

    return CatalogProduct(
        id=product_id,
        name=values.get("name") or DEFAULT_PRODUCT_NAME,
        brand=values.get("brand") or DEFAULT_BRAND,
        article=values.get("article"),
        brand_code=values.get("brand_code") or DEFAULT_BRAND_CODE,
        cli_code=values.get("cli_code"),
        class_name=values.get("class_name") or DEFAULT_CLASS,
        class_code=class_code,
    )


def parse_catalog_file(
    file: Union[str, Path, BytesIO, bytes],
    filename: Optional[str] = None,
) -> CatalogParseResult:
    """
    Parse a price-list export (CSV or Excel).

    Malformed or invalid rows are skipped and reported as warnings; the
    rest of the file is still returned.

    Args:
        file: File path, raw bytes or file-like object
        filename: Original file name, used to pick the reader

    Returns:
        CatalogParseResult

    Raises:
        ImportFileError: If the file cannot be read, is empty or lacks an
                         id column
    """
    table = read_table(file, filename)

    if not table.has_data:
        raise ImportFileError(message="File contains no data")

    mapping = build_mapping(table.headers, PRODUCT_COLUMN_ALIASES)
    missing = [name for name in REQUIRED_FIELDS if name not in mapping.fields]
    if missing:
        raise ImportFileError(
            message=f"Missing required columns: {', '.join(missing)}",
            details={"headers": table.headers}
        )

    result = CatalogParseResult(total=len(table.rows), warnings=list(table.warnings))
    # id -> (row number, product); a later row with the same id wins
    by_id: dict[int, tuple[int, CatalogProduct]] = {}

    for offset, raw_row in enumerate(table.rows):
        row_number = offset + 2
        try:
            product = validate_product_row(raw_row, mapping, row_number)
        except (RowParseError, RowValidationError) as e:
            result.warnings.append(e.message)
            continue
        except ValueError as e:
            # pydantic rejected the assembled row
            result.warnings.append(RowParseError(row_number, str(e)).message)
            continue

        previous = by_id.pop(product.id, None)
        if previous is not None:
            result.warnings.append(RowParseError(
                previous[0], f"duplicate id {product.id}, replaced by row {row_number}"
            ).message)
        by_id[product.id] = (row_number, product)

    result.products = [product for _, product in by_id.values()]

    logger.info(
        "catalog_parsed",
        total=result.total,
        valid=len(result.products),
        warnings=len(result.warnings)
    )

    return result
