"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
)
from models.record import (
    UNSPECIFIED_NAME,
    CanonicalRecord,
    EditableRow,
    RowPatch,
)
from models.catalog import CatalogProduct
from models.matching import (
    MatchTier,
    MatchStrategy,
    CatalogEntry,
    MatchQuery,
    CandidateMatch,
    SuggestRequest,
    SuggestionResponse,
)
from models.imports import (
    FailedRow,
    ReconciliationResult,
    ImportResponse,
    ClearResponse,
    ParsedMaterialsResponse,
)
from models.session import (
    SessionCreate,
    SessionResponse,
    PatchRowsRequest,
    RowIdsRequest,
    ReorderRequest,
    ClearRequest,
    SelectMatchRequest,
    SessionSuggestionsResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",

    # Records
    "UNSPECIFIED_NAME",
    "CanonicalRecord",
    "EditableRow",
    "RowPatch",

    # Catalog
    "CatalogProduct",

    # Matching
    "MatchTier",
    "MatchStrategy",
    "CatalogEntry",
    "MatchQuery",
    "CandidateMatch",
    "SuggestRequest",
    "SuggestionResponse",

    # Imports
    "FailedRow",
    "ReconciliationResult",
    "ImportResponse",
    "ClearResponse",
    "ParsedMaterialsResponse",

    # Sessions
    "SessionCreate",
    "SessionResponse",
    "PatchRowsRequest",
    "RowIdsRequest",
    "ReorderRequest",
    "ClearRequest",
    "SelectMatchRequest",
    "SessionSuggestionsResponse",
]
