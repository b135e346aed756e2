"""
Unit tests for SupabaseCatalogStore.
"""

import pytest

from exceptions import CatalogEntryNotFoundError, DatabaseError
from services.catalog_store import SupabaseCatalogStore

TABLE = "prise_list_etm"


@pytest.fixture
def store(mock_supabase, sample_catalog_rows):
    mock_supabase.set_table_data(TABLE, sample_catalog_rows)
    return SupabaseCatalogStore(table=TABLE, key="id", client=mock_supabase)


class TestCatalogStoreReads:
    """Tests for select_existing()/fetch_all()/count()"""

    def test_select_existing(self, store):
        assert store.select_existing([101, 103, 999]) == {101, 103}

    def test_select_existing_empty_keys_skips_query(self, store, mock_supabase):
        assert store.select_existing([]) == set()
        assert mock_supabase.table(TABLE).calls == []

    def test_fetch_all_respects_limit(self, store):
        rows = store.fetch_all(limit=2)

        assert [row["id"] for row in rows] == [101, 102]

    def test_count(self, store):
        assert store.count() == 3

    def test_query_failure_raises_database_error(self, store, mock_supabase):
        mock_supabase.set_table_error(TABLE, RuntimeError("timeout"))

        with pytest.raises(DatabaseError) as exc_info:
            store.select_existing([101])

        assert "timeout" in exc_info.value.message


class TestCatalogStoreWrites:
    """Tests for upsert()/delete_all()/delete_by_key()"""

    def test_upsert_inserts_and_replaces(self, store, mock_supabase):
        # Arrange
        rows = [
            {"id": 101, "name": "Кабель ВВГнг-LS 3x2.5"},
            {"id": 200, "name": "Гофротруба 20мм"},
        ]

        # Act
        store.upsert(rows)

        # Assert
        stored = {row["id"]: row for row in mock_supabase.table(TABLE).rows}
        assert len(stored) == 4
        assert stored[101]["name"] == "Кабель ВВГнг-LS 3x2.5"
        assert stored[200]["name"] == "Гофротруба 20мм"

    def test_upsert_empty_is_noop(self, store, mock_supabase):
        assert store.upsert([]) == []
        assert mock_supabase.table(TABLE).calls == []

    def test_upsert_failure(self, store, mock_supabase):
        mock_supabase.set_table_error(TABLE, RuntimeError("duplicate key"))

        with pytest.raises(DatabaseError):
            store.upsert([{"id": 1}])

    def test_delete_all(self, store, mock_supabase):
        store.delete_all()

        assert mock_supabase.table(TABLE).rows == []

    def test_delete_all_prefers_admin_client(self, mock_supabase, admin_supabase, sample_catalog_rows):
        admin = admin_supabase
        admin.set_table_data(TABLE, sample_catalog_rows)
        mock_supabase.set_table_data(TABLE, sample_catalog_rows)
        store = SupabaseCatalogStore(table=TABLE, client=mock_supabase, admin_client=admin)

        store.delete_all()

        assert admin.table(TABLE).rows == []
        assert len(mock_supabase.table(TABLE).rows) == 3

    def test_delete_by_key(self, store, mock_supabase):
        store.delete_by_key(102)

        assert [row["id"] for row in mock_supabase.table(TABLE).rows] == [101, 103]

    def test_delete_missing_key(self, store):
        with pytest.raises(CatalogEntryNotFoundError):
            store.delete_by_key(999)
