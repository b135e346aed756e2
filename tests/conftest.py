"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Settings are loaded at import time; required values must exist first
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

# Add project directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from unittest.mock import patch
from typing import Generator, Optional

from tests.factories import InMemoryCatalogStore


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    Filters apply to the table's rows on execute(); writes modify them.
    """

    def __init__(self, table: "MockSupabaseTable"):
        self._table = table
        self._filters = []
        self._action = "select"
        self._payload = None
        self._on_conflict = None
        self._limit = None
        self._order = None

    def select(self, *args, **kwargs):
        self._action = "select"
        return self

    def upsert(self, rows, on_conflict: str = "id", ignore_duplicates: bool = False):
        self._action = "upsert"
        self._payload = [dict(row) for row in (rows if isinstance(rows, list) else [rows])]
        self._on_conflict = on_conflict
        return self

    def delete(self):
        self._action = "delete"
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self._filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        allowed = list(values)
        self._filters.append(lambda row: row.get(column) in allowed)
        return self

    def order(self, column, **kwargs):
        self._order = column
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matches(self, row: dict) -> bool:
        return all(check(row) for check in self._filters)

    def execute(self) -> MockSupabaseResponse:
        self._table.calls.append(self._action)

        if self._table.error is not None:
            raise self._table.error

        rows = self._table.rows

        if self._action == "upsert":
            for new_row in self._payload:
                key = new_row[self._on_conflict]
                for index, row in enumerate(rows):
                    if row.get(self._on_conflict) == key:
                        rows[index] = new_row
                        break
                else:
                    rows.append(new_row)
            return MockSupabaseResponse(data=list(self._payload))

        if self._action == "delete":
            deleted = [row for row in rows if self._matches(row)]
            rows[:] = [row for row in rows if not self._matches(row)]
            return MockSupabaseResponse(data=deleted)

        selected = [row for row in rows if self._matches(row)]
        total = len(selected)
        if self._order:
            selected = sorted(selected, key=lambda row: row.get(self._order))
        if self._limit is not None:
            selected = selected[:self._limit]
        return MockSupabaseResponse(data=selected, count=total)


class MockSupabaseTable:
    """Mock Supabase table holding rows in memory."""

    def __init__(self, rows: list = None):
        self.rows = rows if rows is not None else []
        self.error: Optional[Exception] = None
        self.calls: list[str] = []

    def _query(self) -> MockSupabaseQuery:
        return MockSupabaseQuery(self)

    def select(self, *args, **kwargs):
        return self._query().select(*args, **kwargs)

    def upsert(self, rows, **kwargs):
        return self._query().upsert(rows, **kwargs)

    def delete(self):
        return self._query().delete()


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}

    def set_table_data(self, table_name: str, data: list):
        """Configure mock rows for a table."""
        self._tables[table_name] = MockSupabaseTable([dict(row) for row in data])

    def set_table_error(self, table_name: str, error: Exception):
        """Make every query on a table raise."""
        self.table(table_name).error = error

    def table(self, name: str) -> MockSupabaseTable:
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable()
        return self._tables[name]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("prise_list_etm", [
                {"id": 1, "name": "Кабель ВВГ", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def admin_supabase() -> MockSupabaseClient:
    """Second mock client standing in for the service-role connection."""
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """Patch the database client with mock."""
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.catalog_store.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def catalog_store() -> InMemoryCatalogStore:
    return InMemoryCatalogStore()


@pytest.fixture
def sample_catalog_rows() -> list:
    """Catalog table rows as stored."""
    return [
        {
            "id": 101,
            "name": "Кабель ВВГнг 3x2.5",
            "brand": "Камкабель",
            "article": None,
            "brand_code": "VVG-325",
            "cli_code": None,
            "class": "Кабели",
            "class_code": 10
        },
        {
            "id": 102,
            "name": "Автоматический выключатель 16А",
            "brand": "IEK",
            "article": "BA47-29",
            "brand_code": "MVA20-1-016-C",
            "cli_code": None,
            "class": "Автоматика",
            "class_code": 20
        },
        {
            "id": 103,
            "name": "Светильник светодиодный",
            "brand": "Не указан",
            "article": None,
            "brand_code": "НК",
            "cli_code": None,
            "class": "Без категории",
            "class_code": 1
        }
    ]


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_store(catalog_store):
    """
    FastAPI test client whose services run against an in-memory store.

    Usage:
        def test_endpoint(test_client_with_store, catalog_store):
            catalog_store.rows[1] = {...}
            response = test_client_with_store.get("/api/catalog/count")
    """
    from fastapi.testclient import TestClient
    from main import app
    from services.import_service import ImportService
    from services.matching_service import MatchingService

    import_service = ImportService(catalog_store, batch_delay_seconds=0)
    matching_service = MatchingService(catalog_store)

    with patch("main.check_connection", return_value={"status": "healthy", "catalog_count": 0}):
        with patch("routes.catalog.get_import_service", return_value=import_service):
            with patch("routes.catalog.get_catalog_store", return_value=catalog_store):
                with patch("routes.matching.get_matching_service", return_value=matching_service):
                    with patch("routes.sessions.get_matching_service", return_value=matching_service):
                        yield TestClient(app)
