"""
Test data factories.

Uses factory pattern to generate consistent test data.
"""

import csv
from io import BytesIO, StringIO
from typing import Any, Iterable, Optional

import pandas as pd

from exceptions import CatalogEntryNotFoundError
from models.catalog import CatalogProduct
from models.matching import CatalogEntry
from models.record import CanonicalRecord, EditableRow


class RecordFactory:
    """
    Factory for canonical/editable rows.

    Usage:
        record = RecordFactory.create(name="Кабель ВВГ 3x2.5")
        rows = RecordFactory.create_rows(5)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        name: Optional[str] = None,
        manufacturer: Optional[str] = None,
        quantity: Optional[float] = 1,
        **overrides
    ) -> CanonicalRecord:
        counter = cls._next_counter()
        return CanonicalRecord(
            position=overrides.pop("position", counter),
            name=name or f"Материал {counter}",
            manufacturer=manufacturer,
            quantity=quantity,
            **overrides
        )

    @classmethod
    def create_row(cls, **kwargs) -> EditableRow:
        return EditableRow.from_record(cls.create(**kwargs))

    @classmethod
    def create_rows(cls, count: int, **overrides) -> list[EditableRow]:
        return [cls.create_row(**overrides) for _ in range(count)]

    @classmethod
    def reset_counter(cls):
        cls._counter = 0


class CatalogProductFactory:
    """Factory for price-list products (import input)."""

    @classmethod
    def create(cls, id: int, **overrides) -> CatalogProduct:
        return CatalogProduct(
            id=id,
            name=overrides.pop("name", f"Товар {id}"),
            **overrides
        )

    @classmethod
    def create_batch(cls, count: int, start_id: int = 1) -> list[CatalogProduct]:
        return [cls.create(id=i) for i in range(start_id, start_id + count)]


class CatalogEntryFactory:
    """Factory for matching-engine catalog entries."""

    _counter = 0

    @classmethod
    def create(
        cls,
        name: str,
        manufacturer: Optional[str] = None,
        id: Optional[int] = None,
        **overrides
    ) -> CatalogEntry:
        cls._counter += 1
        return CatalogEntry(
            id=id or cls._counter,
            name=name,
            manufacturer=manufacturer,
            **overrides
        )


# ===================
# FILE BUILDERS
# ===================

def create_excel_file(rows: list[dict], columns: Optional[list[str]] = None) -> BytesIO:
    """Helper to create test Excel files in memory."""
    output = BytesIO()
    df = pd.DataFrame(rows, columns=columns)
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Лист1", index=False)
    output.seek(0)
    return output


def create_csv_file(header: list[str], rows: list[list]) -> BytesIO:
    """Helper to create test CSV files in memory (quoting as needed)."""
    text = StringIO()
    writer = csv.writer(text)
    writer.writerow(header)
    writer.writerows(rows)
    return BytesIO(text.getvalue().encode("utf-8"))


# ===================
# STORE DOUBLES
# ===================

class InMemoryCatalogStore:
    """
    Catalog store double keyed by "id".

    upsert calls listed in fail_on_upsert (1-based) raise instead of
    writing, which makes that import batch fail.
    """

    def __init__(self, rows: Iterable[dict] = (), fail_on_upsert: Iterable[int] = ()):
        self.table = "test_catalog"
        self.key = "id"
        self.rows: dict[Any, dict] = {row["id"]: dict(row) for row in rows}
        self.fail_on_upsert = set(fail_on_upsert)
        self.upsert_calls = 0

    def select_existing(self, keys):
        return {key for key in keys if key in self.rows}

    def fetch_all(self, limit=None):
        rows = [self.rows[key] for key in sorted(self.rows)]
        return rows[:limit] if limit else rows

    def count(self):
        return len(self.rows)

    def upsert(self, rows, on_conflict=None):
        self.upsert_calls += 1
        if self.upsert_calls in self.fail_on_upsert:
            raise RuntimeError("connection reset")
        for row in rows:
            self.rows[row[on_conflict or self.key]] = dict(row)
        return rows

    def delete_all(self):
        self.rows.clear()

    def delete_by_key(self, key):
        if self.rows.pop(key, None) is None:
            raise CatalogEntryNotFoundError(str(key))
