"""
Unit tests for the batched importer.

Run: pytest tests/unit/test_import_service.py -v
"""

import pytest

from services.import_service import ImportService, batch_count, partition

from tests.factories import CatalogProductFactory, InMemoryCatalogStore, create_csv_file


def make_service(store, **kwargs) -> ImportService:
    kwargs.setdefault("batch_delay_seconds", 0)
    return ImportService(store, **kwargs)


class TestPartition:
    """Tests for partition()/batch_count()"""

    def test_sizes(self):
        batches = partition(list(range(10)), 3)

        assert [len(b) for b in batches] == [3, 3, 3, 1]
        assert [row for batch in batches for row in batch] == list(range(10))

    def test_batch_count(self):
        assert batch_count(2500, 1000) == 3
        assert batch_count(1000, 1000) == 1
        assert batch_count(0, 1000) == 0

    def test_empty(self):
        assert partition([], 5) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            partition([1], 0)


class TestImportRecords:
    """Tests for ImportService.import_records()"""

    def test_fresh_import_inserts(self):
        # Arrange
        store = InMemoryCatalogStore()
        service = make_service(store)

        # Act
        result = service.import_records(CatalogProductFactory.create_batch(5), batch_size=2)

        # Assert
        assert result.inserted_count == 5
        assert result.updated_count == 0
        assert result.batch_count == 3
        assert result.success
        assert store.count() == 5

    def test_reimport_is_idempotent(self):
        store = InMemoryCatalogStore()
        service = make_service(store)
        products = CatalogProductFactory.create_batch(5)

        service.import_records(products)
        second = service.import_records(products)

        assert second.inserted_count == 0
        assert second.updated_count == 5
        assert store.count() == 5

    def test_mixed_insert_and_update(self):
        store = InMemoryCatalogStore(rows=[{"id": 1, "name": "Старое имя"}])
        service = make_service(store)

        result = service.import_records(CatalogProductFactory.create_batch(3))

        assert (result.inserted_count, result.updated_count) == (2, 1)
        assert store.rows[1]["name"] == "Товар 1"
        assert store.rows[1]["class"] == "Без категории"

    def test_failed_batch_is_isolated(self):
        # Arrange
        store = InMemoryCatalogStore(fail_on_upsert={2})
        service = make_service(store)
        products = CatalogProductFactory.create_batch(2500)

        # Act
        result = service.import_records(products, batch_size=1000)

        # Assert
        assert result.inserted_count == 1500
        assert result.updated_count == 0
        assert result.errors == ["batch 2: connection reset"]
        assert len(result.failed_rows) == 1000
        assert result.failed_rows[0].row.id == 1001
        assert result.failed_rows[0].reason == "connection reset"
        assert result.inserted_count + result.updated_count + len(result.failed_rows) == result.total_rows
        assert not result.success
        assert store.count() == 1500

    def test_progress_reported(self):
        service = make_service(InMemoryCatalogStore())
        calls = []

        service.import_records(
            CatalogProductFactory.create_batch(2500),
            batch_size=1000,
            on_progress=lambda percent, processed: calls.append((percent, processed))
        )

        assert calls == [(40, 1000), (80, 2000), (100, 2500), (100, 2500)]

    def test_progress_skips_failed_batch_but_always_finishes(self):
        service = make_service(InMemoryCatalogStore(fail_on_upsert={3}))
        calls = []

        service.import_records(
            CatalogProductFactory.create_batch(2500),
            batch_size=1000,
            on_progress=lambda percent, processed: calls.append((percent, processed))
        )

        assert calls == [(40, 1000), (80, 2000), (100, 2000)]

    def test_empty_input_reports_completion(self):
        calls = []

        result = make_service(InMemoryCatalogStore()).import_records(
            [], on_progress=lambda percent, processed: calls.append((percent, processed))
        )

        assert result.total_rows == 0
        assert result.success
        assert calls == [(100, 0)]

    def test_cancel_between_batches(self):
        # Arrange
        store = InMemoryCatalogStore()
        service = make_service(store)
        answers = iter([False, True])

        # Act
        result = service.import_records(
            CatalogProductFactory.create_batch(2500),
            batch_size=1000,
            should_cancel=lambda: next(answers)
        )

        # Assert
        assert result.cancelled
        assert result.inserted_count == 1000
        assert not result.success
        assert store.count() == 1000

    def test_delay_between_batches_only(self):
        sleeps = []
        service = ImportService(InMemoryCatalogStore(), batch_delay_seconds=0.1, sleep=sleeps.append)

        service.import_records(CatalogProductFactory.create_batch(25), batch_size=10)

        assert sleeps == [0.1, 0.1]

    def test_plain_dict_rows(self):
        store = InMemoryCatalogStore()

        result = make_service(store).import_records([{"id": 7, "name": "Кабель"}])

        assert result.inserted_count == 1
        assert store.rows[7] == {"id": 7, "name": "Кабель"}

    def test_to_response_bounds_messages(self):
        service = make_service(InMemoryCatalogStore(fail_on_upsert={1, 2, 3}))

        result = service.import_records(CatalogProductFactory.create_batch(3), batch_size=1)
        response = result.to_response(max_messages=2)

        assert response.success is False
        assert response.failed == 3
        assert response.errors == ["batch 1: connection reset", "batch 2: connection reset"]


class TestImportFile:
    """Tests for ImportService.import_file()"""

    def test_imports_valid_rows_and_warns(self):
        # Arrange
        store = InMemoryCatalogStore()
        file = create_csv_file(
            ["id", "name", "brand"],
            [[1, "Кабель ВВГ", "Камкабель"], ["abc", "Ошибка", ""], [2, "Автомат", "IEK"]]
        )

        # Act
        result = make_service(store).import_file(file, "price.csv")

        # Assert
        assert result.inserted_count == 2
        assert result.total_rows == 2
        assert result.warnings == ['Row 3: invalid id "abc" (must be a positive integer)']
        assert result.success
        assert store.rows[2]["brand"] == "IEK"

    def test_duplicate_ids_counted_once(self):
        store = InMemoryCatalogStore()
        file = create_csv_file(["id", "name"], [[5, "Кабель старый"], [5, "Кабель новый"]])

        result = make_service(store).import_file(file, "price.csv")

        assert result.inserted_count == 1
        assert result.total_rows == 1
        assert store.rows[5]["name"] == "Кабель новый"
        assert len(result.warnings) == 1

    def test_unreadable_file(self):
        store = InMemoryCatalogStore()

        result = make_service(store).import_file(b"", "price.csv")

        assert result.total_rows == 0
        assert result.errors == ["CSV file is empty"]
        assert not result.success
        assert store.upsert_calls == 0


class TestClear:
    """Tests for clear_all()/delete_by_key()"""

    def test_clear_all(self):
        store = InMemoryCatalogStore(rows=[{"id": 1}, {"id": 2}])

        make_service(store).clear_all()

        assert store.count() == 0

    def test_delete_by_key(self):
        store = InMemoryCatalogStore(rows=[{"id": 1}, {"id": 2}])

        make_service(store).delete_by_key(1)

        assert list(store.rows) == [2]
