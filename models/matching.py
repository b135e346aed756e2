"""
Matching schemas: catalog entries, queries and ranked candidates.
"""

from pydantic import BaseModel, Field
from enum import Enum
from typing import Optional

from models.base import BaseSchema
from models.catalog import CatalogProduct, DEFAULT_UNIT


class MatchTier(str, Enum):
    """Strategy level that produced a candidate."""
    EXACT = "exact"
    KEYWORD = "keyword"
    SIMILARITY = "similarity"


class MatchStrategy(str, Enum):
    """Client-selectable search strategy."""
    EXACT = "exact"
    KEYWORD = "keyword"
    SIMILARITY = "similarity"
    COMBINED = "combined"


class CatalogEntry(BaseSchema):
    """Catalog row as seen by the matching engine."""

    id: int
    code: Optional[str] = None
    name: str
    manufacturer: Optional[str] = None
    unit: Optional[str] = DEFAULT_UNIT
    price: Optional[float] = 0
    source: Optional[str] = None

    @classmethod
    def from_product(cls, product: CatalogProduct, source: str) -> "CatalogEntry":
        return cls(
            id=product.id,
            code=product.brand_code,
            name=product.name,
            manufacturer=product.brand,
            unit=DEFAULT_UNIT,
            price=0,
            source=source,
        )


class MatchQuery(BaseSchema):
    """Free-text description to match against the catalog."""

    text: str = Field(..., description="Item name to match")
    manufacturer: Optional[str] = Field(None, description="Item manufacturer, if known")


class CandidateMatch(BaseModel):
    """One ranked suggestion. Transient, never cached."""

    entry: CatalogEntry
    score: int = Field(..., ge=0, le=100)
    tier: MatchTier

    def to_suggestion(self) -> dict:
        """Flatten into the suggestion surface."""
        return {
            "id": self.entry.id,
            "code": self.entry.code,
            "name": self.entry.name,
            "manufacturer": self.entry.manufacturer,
            "unit": self.entry.unit,
            "price": self.entry.price,
            "source": self.entry.source,
            "score": self.score,
            "tier": self.tier.value,
        }


class SuggestRequest(BaseSchema):
    """Request body for a single suggestion lookup."""

    name: str = Field(..., min_length=1)
    manufacturer: Optional[str] = None
    strategy: MatchStrategy = MatchStrategy.COMBINED
    top_k: Optional[int] = Field(None, ge=1, le=50)


class SuggestionResponse(BaseModel):
    """Flattened suggestion returned by the API."""

    id: int
    code: Optional[str] = None
    name: str
    manufacturer: Optional[str] = None
    unit: Optional[str] = None
    price: Optional[float] = None
    source: Optional[str] = None
    score: int
    tier: MatchTier
