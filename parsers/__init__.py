"""
Import file parsers module.

Header normalization, column mapping, record coercion and the CSV/Excel
readers feeding them.
"""

from parsers.column_mapper import (
    ColumnMapping,
    build_mapping,
    resolve_header,
)
from parsers.record_coercer import (
    coerce_number,
    coerce_int,
    coerce_text,
    coerce_record,
    coerce_rows,
    CoercionResult,
)
from parsers.table import TableData, read_table
from parsers.excel_parser import (
    parse_specification,
    SpecificationParseResult,
)
from parsers.catalog_parser import (
    parse_catalog_file,
    CatalogParseResult,
)

__all__ = [
    "ColumnMapping",
    "build_mapping",
    "resolve_header",
    "coerce_number",
    "coerce_int",
    "coerce_text",
    "coerce_record",
    "coerce_rows",
    "CoercionResult",
    "TableData",
    "read_table",
    "parse_specification",
    "SpecificationParseResult",
    "parse_catalog_file",
    "CatalogParseResult",
]
