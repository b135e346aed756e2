"""
Catalog store backed by a Supabase table.

Exposes the record-oriented operations the importer and matcher rely on:
existence check, conditional upsert, delete-all, delete-by-key and reads.
Any object with the same methods can stand in for it.
"""

from typing import Any, Iterable, Optional
import structlog

from config import get_admin_client, get_supabase_client, settings
from exceptions import CatalogEntryNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)


class SupabaseCatalogStore:
    """
    Flat keyed catalog table.

    The natural key is an externally supplied identifier (e.g. the price
    list id), used as the upsert conflict target.
    """

    def __init__(
        self,
        table: Optional[str] = None,
        key: Optional[str] = None,
        client=None,
        admin_client=None,
    ):
        self.db = client or get_supabase_client()
        # Service-role client for the unfiltered delete; falls back to db
        self.admin_db = admin_client
        self.table = table or settings.catalog_table
        self.key = key or settings.catalog_key

    # ===================
    # READ OPERATIONS
    # ===================

    def select_existing(self, keys: Iterable[Any]) -> set:
        """
        Return the subset of keys already present in the table.

        Raises:
            DatabaseError: If the query fails
        """
        keys = list(keys)
        if not keys:
            return set()

        logger.debug("selecting_existing_keys", table=self.table, count=len(keys))

        try:
            result = (
                self.db.table(self.table)
                .select(self.key)
                .in_(self.key, keys)
                .execute()
            )
            return {row[self.key] for row in result.data or []}

        except Exception as e:
            logger.error(
                "select_existing_failed",
                table=self.table,
                count=len(keys),
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def fetch_all(self, limit: Optional[int] = None) -> list[dict]:
        """
        Read catalog rows ordered by key.

        Args:
            limit: Maximum rows to return (defaults to catalog_fetch_limit)
        """
        limit = limit or settings.catalog_fetch_limit
        logger.debug("fetching_catalog", table=self.table, limit=limit)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .order(self.key)
                .limit(limit)
                .execute()
            )
            return list(result.data or [])

        except Exception as e:
            logger.error("fetch_catalog_failed", table=self.table, error=str(e))
            raise DatabaseError("select", str(e))

    def count(self) -> int:
        """Count catalog rows."""
        try:
            result = (
                self.db.table(self.table)
                .select(self.key, count="exact")
                .limit(1)
                .execute()
            )
            return result.count or 0
        except Exception as e:
            logger.error("count_catalog_failed", table=self.table, error=str(e))
            raise DatabaseError("count", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def upsert(self, rows: list[dict], on_conflict: Optional[str] = None) -> list[dict]:
        """
        Insert-or-replace rows keyed by the natural key.

        Args:
            rows: Table rows
            on_conflict: Conflict column (defaults to the store key)

        Returns:
            Rows as written by the store

        Raises:
            DatabaseError: If the store rejects the batch
        """
        if not rows:
            return []

        try:
            result = (
                self.db.table(self.table)
                .upsert(
                    rows,
                    on_conflict=on_conflict or self.key,
                    ignore_duplicates=False
                )
                .execute()
            )
            return list(result.data or [])

        except Exception as e:
            logger.error(
                "catalog_upsert_failed",
                table=self.table,
                count=len(rows),
                error=str(e)
            )
            raise DatabaseError("upsert", str(e))

    def delete_all(self) -> None:
        """
        Unconditionally delete every row.

        PostgREST refuses a DELETE without a filter, so the filter matches
        every real key.
        """
        logger.info("deleting_all_catalog_rows", table=self.table)

        try:
            (self.admin_db or self.db).table(self.table).delete().neq(self.key, -1).execute()
        except Exception as e:
            logger.error("delete_all_failed", table=self.table, error=str(e))
            raise DatabaseError("delete", str(e))

    def delete_by_key(self, key: Any) -> None:
        """
        Delete one row by its natural key.

        Raises:
            CatalogEntryNotFoundError: If no row has this key
            DatabaseError: If the delete fails
        """
        logger.info("deleting_catalog_row", table=self.table, key=key)

        try:
            result = self.db.table(self.table).delete().eq(self.key, key).execute()
        except Exception as e:
            logger.error(
                "delete_by_key_failed",
                table=self.table,
                key=key,
                error=str(e)
            )
            raise DatabaseError("delete", str(e))

        if not result.data:
            raise CatalogEntryNotFoundError(str(key))


# Singleton instance for convenience
_catalog_store: Optional[SupabaseCatalogStore] = None


def get_catalog_store() -> SupabaseCatalogStore:
    """Get or create the catalog store instance."""
    global _catalog_store
    if _catalog_store is None:
        _catalog_store = SupabaseCatalogStore(admin_client=get_admin_client())
    return _catalog_store
