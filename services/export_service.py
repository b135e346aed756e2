"""
Export service: write edited rows back to an Excel workbook.

Headers use the material alias labels so an exported file can be
re-imported without any unmapped columns.
"""

from io import BytesIO
from typing import Iterable

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment
from openpyxl.utils import get_column_letter
import structlog

from models.record import CanonicalRecord

logger = structlog.get_logger(__name__)

SHEET_TITLE = "Материалы"

# (header, record field, column width)
EXPORT_COLUMNS = [
    ("№", "position", 5),
    ("Наименование", "name", 40),
    ("Тип, марка", "type_mark", 15),
    ("Код", "code", 15),
    ("Производитель", "manufacturer", 20),
    ("Ед. изм.", "unit", 10),
    ("Кол-во", "quantity", 10),
    ("Цена", "price", 12),
    ("Основание", "price_source", 15),
    ("Код товара", "product_code", 15),
    ("Примечания", "notes", 30),
]


def export_rows(rows: Iterable[CanonicalRecord]) -> BytesIO:
    """
    Build an .xlsx file from rows.

    Args:
        rows: Records in display order

    Returns:
        BytesIO containing the Excel file
    """
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    header_font = Font(bold=True)
    for col, (header, _, width) in enumerate(EXPORT_COLUMNS, start=1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        ws.column_dimensions[get_column_letter(col)].width = width

    count = 0
    for row_idx, record in enumerate(rows, start=2):
        for col, (_, field_name, _) in enumerate(EXPORT_COLUMNS, start=1):
            ws.cell(row=row_idx, column=col, value=getattr(record, field_name))
        count += 1

    ws.freeze_panes = "A2"

    output = BytesIO()
    wb.save(output)
    output.seek(0)

    logger.info("rows_exported", count=count)

    return output
