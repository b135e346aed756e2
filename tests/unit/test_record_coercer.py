"""
Unit tests for the record coercer.
"""

import math

import pytest

from config.column_mapping import MATERIAL_COLUMN_ALIASES
from models.record import UNSPECIFIED_NAME
from parsers.column_mapper import build_mapping
from parsers.record_coercer import (
    coerce_number,
    coerce_int,
    coerce_text,
    coerce_fields,
    coerce_record,
    coerce_rows,
)


class TestCoerceNumber:
    """Tests for coerce_number()"""

    @pytest.mark.parametrize("raw, expected", [
        ("5,5", 5.5),
        ("1 250,50 ₽", 1250.5),
        ("1,250.50", 1250.5),
        ("1.250,50", 1250.5),
        ("-3", -3.0),
        (7, 7.0),
        (2.25, 2.25),
    ])
    def test_parses(self, raw, expected):
        assert coerce_number(raw) == (expected, True)

    @pytest.mark.parametrize("raw", [None, "", "   ", float("nan")])
    def test_blank_is_none_without_error(self, raw):
        assert coerce_number(raw) == (None, True)

    @pytest.mark.parametrize("raw", ["abc", "много", True])
    def test_garbage_is_rejected(self, raw):
        assert coerce_number(raw) == (None, False)

    def test_never_returns_nan(self):
        value, _ = coerce_number("nan")
        assert value is None or not math.isnan(value)


class TestCoerceInt:
    """Tests for coerce_int()"""

    def test_integer_text(self):
        assert coerce_int("3") == (3, True)

    def test_spreadsheet_float(self):
        assert coerce_int(12.0) == (12, True)

    def test_fraction_rejected(self):
        assert coerce_int("2,5") == (None, False)


class TestCoerceText:
    """Tests for coerce_text()"""

    def test_trims(self):
        assert coerce_text("  IEK  ") == ("IEK", True)

    def test_integer_float_loses_decimal(self):
        assert coerce_text(102.0) == ("102", True)

    def test_blank_is_none(self):
        assert coerce_text("  ") == (None, True)


class TestCoerceRecord:
    """Tests for coerce_fields()/coerce_record()"""

    @pytest.fixture
    def mapping(self):
        return build_mapping(
            ["№", "Наименование", "Кол-во", "Количество", "Цена", "Склад"],
            MATERIAL_COLUMN_ALIASES
        )

    def test_last_header_wins_for_shared_field(self, mapping):
        # Arrange
        raw = {"№": "1", "Наименование": "Кабель", "Кол-во": "5", "Количество": "7"}

        # Act
        values, rejected = coerce_fields(raw, mapping)

        # Assert
        assert values["quantity"] == 7.0
        assert rejected == []

    def test_unmapped_cells_ignored(self, mapping):
        record = coerce_record({"Наименование": "Кабель", "Склад": "A-1"}, mapping)

        assert record.name == "Кабель"
        assert "Склад" not in record.model_dump()

    def test_bad_number_becomes_none(self, mapping):
        record = coerce_record({"Наименование": "Кабель", "Цена": "договорная"}, mapping)

        assert record.price is None

    def test_missing_name_dropped(self, mapping):
        assert coerce_record({"Наименование": "  ", "Цена": "10"}, mapping) is None

    def test_missing_name_defaulted(self, mapping):
        record = coerce_record({"Цена": "10"}, mapping, default_name=UNSPECIFIED_NAME)

        assert record.name == UNSPECIFIED_NAME
        assert record.price == 10.0


class TestCoerceRows:
    """Tests for coerce_rows()"""

    def test_drops_unnamed_and_warns_on_bad_cells(self):
        # Arrange
        mapping = build_mapping(["Наименование", "Кол-во"], MATERIAL_COLUMN_ALIASES)
        rows = [
            {"Наименование": "Кабель ВВГ", "Кол-во": "много"},
            {"Наименование": "", "Кол-во": "3"},
            {"Наименование": "Труба ПНД", "Кол-во": "12,5"},
        ]

        # Act
        result = coerce_rows(rows, mapping)

        # Assert
        assert [r.name for r in result.records] == ["Кабель ВВГ", "Труба ПНД"]
        assert result.records[0].quantity is None
        assert result.records[1].quantity == 12.5
        assert result.dropped == 1
        assert result.warnings == ["Row 2: could not parse quantity value 'много'"]
