"""
Canonical record schemas.

One schema covers equipment, material and product-line imports; fields a
source file does not carry stay None.
"""

from pydantic import Field, field_validator
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from models.base import BaseSchema, TimestampMixin

# Sentinel used when a caller asks for a default name
UNSPECIFIED_NAME = "Не указано"

# Field coercion types for the record coercer
INTEGER_FIELDS = frozenset({"position"})
NUMERIC_FIELDS = frozenset({"quantity", "price"})
TEXT_FIELDS = frozenset({
    "name",
    "type_mark",
    "code",
    "manufacturer",
    "unit",
    "price_source",
    "product_code",
    "notes",
})
RECORD_FIELDS = INTEGER_FIELDS | NUMERIC_FIELDS | TEXT_FIELDS


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CanonicalRecord(BaseSchema):
    """
    Normalized representation of one catalog/import line.

    Numeric fields are None rather than NaN when a cell cannot be parsed.
    """

    position: Optional[int] = Field(None, description="Row number in the source file")
    name: str = Field(..., min_length=1, description="Item name and specs")
    type_mark: Optional[str] = Field(None, description="Type, mark or document reference")
    code: Optional[str] = Field(None, description="Equipment/material code or article")
    manufacturer: Optional[str] = Field(None, description="Manufacturer or brand")
    unit: Optional[str] = Field(None, description="Unit of measure")
    quantity: Optional[float] = Field(None, description="Quantity")
    price: Optional[float] = Field(None, description="Unit price")
    price_source: Optional[str] = Field(None, description="Where the price came from")
    product_code: Optional[str] = Field(None, description="Catalog id of the chosen product")
    notes: Optional[str] = Field(None, description="Free-form notes")


class EditableRow(CanonicalRecord, TimestampMixin):
    """Canonical record held in an editing session."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="Row UUID")

    @classmethod
    def from_record(cls, record: CanonicalRecord) -> "EditableRow":
        now = utc_now()
        return cls(**record.model_dump(), created_at=now, updated_at=now)


class RowPatch(BaseSchema):
    """
    Partial update for an editable row.

    Only provided fields are applied.
    """

    position: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1)
    type_mark: Optional[str] = None
    code: Optional[str] = None
    manufacturer: Optional[str] = None
    unit: Optional[str] = None
    quantity: Optional[float] = None
    price: Optional[float] = None
    price_source: Optional[str] = None
    product_code: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v: Optional[str]) -> str:
        """A row always keeps a name; only omit the field to leave it unchanged."""
        if v is None:
            raise ValueError("name cannot be null")
        return v

    def changes(self) -> dict:
        """Fields explicitly set on this patch."""
        return self.model_dump(exclude_unset=True)
