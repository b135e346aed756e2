"""
Business logic services.

Each service handles one domain area.
"""

from services.catalog_store import SupabaseCatalogStore, get_catalog_store
from services.import_service import (
    ImportService,
    get_import_service,
    partition,
)
from services.matching_service import (
    MatchingConfig,
    MatchingEngine,
    MatchingService,
    get_matching_service,
    select_match,
)
from services.row_store import (
    RowStore,
    RowStoreRegistry,
    get_row_store_registry,
)
from services.export_service import export_rows

__all__ = [
    "SupabaseCatalogStore",
    "get_catalog_store",
    "ImportService",
    "get_import_service",
    "partition",
    "MatchingConfig",
    "MatchingEngine",
    "MatchingService",
    "get_matching_service",
    "select_match",
    "RowStore",
    "RowStoreRegistry",
    "get_row_store_registry",
    "export_rows",
]
