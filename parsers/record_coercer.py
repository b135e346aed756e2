"""
Record coercer.

Turns raw cell values into typed canonical fields. Each field type has a
single coercion function returning (value, ok); none of them raise.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional
import structlog

from models.record import (
    CanonicalRecord,
    INTEGER_FIELDS,
    NUMERIC_FIELDS,
    TEXT_FIELDS,
)
from parsers.column_mapper import ColumnMapping
from utils.text_utils import clean_text

logger = structlog.get_logger(__name__)

_NON_NUMERIC = re.compile(r"[^\d.,\-+]")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def coerce_number(value: Any) -> tuple[Optional[float], bool]:
    """
    Permissive numeric parse.

    Keeps digits, sign and decimal separators; a decimal comma becomes a
    point. "1 250,50 ₽" → 1250.5, "5,5" → 5.5, "abc" → None.

    Returns:
        (number, True) on success, (None, True) for a blank cell,
        (None, False) when the cell has content that is not a number
    """
    if _is_blank(value):
        return None, True

    if isinstance(value, bool):
        return None, False

    if isinstance(value, (int, float)):
        number = float(value)
        if math.isnan(number) or math.isinf(number):
            return None, False
        return number, True

    text = _NON_NUMERIC.sub("", str(value))
    if "," in text and "." in text:
        # The rightmost separator is the decimal one: "1,250.50", "1.250,50"
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    else:
        text = text.replace(",", ".")

    try:
        number = float(text)
    except ValueError:
        return None, False

    if math.isnan(number) or math.isinf(number):
        return None, False
    return number, True


def coerce_int(value: Any) -> tuple[Optional[int], bool]:
    """Integer parse on top of coerce_number; fractional values are rejected."""
    number, ok = coerce_number(value)
    if number is None:
        return None, ok
    if not number.is_integer():
        return None, False
    return int(number), True


def coerce_text(value: Any) -> tuple[Optional[str], bool]:
    """Trim text; an empty cell becomes None."""
    if _is_blank(value):
        return None, True
    if isinstance(value, float) and value.is_integer():
        # Spreadsheet readers hand back codes like 102 as 102.0
        value = int(value)
    return clean_text(value), True


_COERCERS = {
    **{name: coerce_int for name in INTEGER_FIELDS},
    **{name: coerce_number for name in NUMERIC_FIELDS},
    **{name: coerce_text for name in TEXT_FIELDS},
}


def coerce_fields(
    raw_row: Mapping[str, Any],
    mapping: ColumnMapping,
) -> tuple[dict[str, Any], list[str]]:
    """
    Coerce the mapped cells of one row.

    Later headers overwrite earlier ones mapped to the same field.

    Returns:
        (field values, names of fields whose cells could not be parsed)
    """
    values: dict[str, Any] = {}
    rejected: list[str] = []

    for header, raw_value in raw_row.items():
        field_id = mapping.field_for(header)
        if field_id is None:
            continue
        coercer = _COERCERS.get(field_id, coerce_text)
        value, ok = coercer(raw_value)
        if not ok:
            rejected.append(field_id)
        values[field_id] = value

    return values, rejected


def coerce_record(
    raw_row: Mapping[str, Any],
    mapping: ColumnMapping,
    default_name: Optional[str] = None,
) -> Optional[CanonicalRecord]:
    """
    Convert one raw row into a CanonicalRecord.

    Args:
        raw_row: Header → cell value
        mapping: Column mapping for the file
        default_name: Name used when the row has none; when omitted such
                      rows are dropped

    Returns:
        CanonicalRecord, or None if the row has no name and no default
    """
    values, _ = coerce_fields(raw_row, mapping)

    if not values.get("name"):
        if default_name is None:
            return None
        values["name"] = default_name

    return CanonicalRecord(**{
        key: value for key, value in values.items() if key in _COERCERS
    })


@dataclass
class CoercionResult:
    """Records produced from a row set plus diagnostics."""
    records: list[CanonicalRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    dropped: int = 0


def coerce_rows(
    rows: Iterable[Mapping[str, Any]],
    mapping: ColumnMapping,
    default_name: Optional[str] = None,
    first_row_number: int = 2,
) -> CoercionResult:
    """
    Coerce a whole row set.

    Rows without a name are filtered out (counted in `dropped`). Cells that
    could not be parsed are kept as None and reported as warnings.

    Args:
        rows: Raw rows in file order
        mapping: Column mapping for the file
        default_name: See coerce_record
        first_row_number: Spreadsheet row number of the first data row

    Returns:
        CoercionResult
    """
    result = CoercionResult()

    for offset, raw_row in enumerate(rows):
        row_number = first_row_number + offset
        values, rejected = coerce_fields(raw_row, mapping)

        if not values.get("name") and default_name is None:
            result.dropped += 1
            continue

        for field_id in rejected:
            result.warnings.append(
                f"Row {row_number}: could not parse {field_id} value "
                f"{_cell_for(raw_row, mapping, field_id)!r}"
            )

        record = coerce_record(raw_row, mapping, default_name=default_name)
        if record is not None:
            result.records.append(record)

    logger.debug(
        "rows_coerced",
        records=len(result.records),
        dropped=result.dropped,
        warnings=len(result.warnings)
    )

    return result


def _cell_for(raw_row: Mapping[str, Any], mapping: ColumnMapping, field_id: str) -> Any:
    value = None
    for header, raw_value in raw_row.items():
        if mapping.field_for(header) == field_id:
            value = raw_value
    return value
