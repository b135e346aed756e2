"""
Tests for export_service: edited rows to Excel.
"""

from openpyxl import load_workbook

from parsers.excel_parser import parse_specification
from services.export_service import EXPORT_COLUMNS, SHEET_TITLE, export_rows

from tests.factories import RecordFactory


class TestExportRows:
    """Tests for export_rows()"""

    def test_writes_header_and_rows(self):
        # Arrange
        rows = [
            RecordFactory.create_row(name="Кабель ВВГнг 3x2.5", manufacturer="Камкабель", quantity=120, price=85.5),
            RecordFactory.create_row(name="Автомат 16А", manufacturer="IEK", quantity=4),
        ]

        # Act
        output = export_rows(rows)

        # Assert
        ws = load_workbook(output).active
        assert ws.title == SHEET_TITLE
        assert [cell.value for cell in ws[1]] == [header for header, _, _ in EXPORT_COLUMNS]
        assert ws["B2"].value == "Кабель ВВГнг 3x2.5"
        assert ws["E2"].value == "Камкабель"
        assert ws["H2"].value == 85.5
        assert ws["B3"].value == "Автомат 16А"
        assert ws.freeze_panes == "A2"

    def test_empty_export_has_header_only(self):
        ws = load_workbook(export_rows([])).active

        assert ws.max_row == 1

    def test_export_reimports_without_unmapped_columns(self):
        rows = [RecordFactory.create_row(name="Труба ПНД 32", quantity=12.5, notes="бухта 100 м")]

        result = parse_specification(export_rows(rows), "export.xlsx")

        assert result.mapping.unmapped == ()
        assert result.records[0].name == "Труба ПНД 32"
        assert result.records[0].quantity == 12.5
        assert result.records[0].notes == "бухта 100 м"
