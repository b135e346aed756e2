"""
Price-list catalog schemas.

Rows are keyed by the external catalog id (natural key), never by a
store-generated surrogate.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema

# Defaults for empty cells (the table columns are NOT NULL)
DEFAULT_PRODUCT_NAME = "Не указано"
DEFAULT_BRAND = "Не указан"
DEFAULT_BRAND_CODE = "НК"
DEFAULT_CLASS = "Без категории"
DEFAULT_CLASS_CODE = 1
DEFAULT_UNIT = "шт."


class CatalogProduct(BaseSchema):
    """
    One price-list row ready for upsert.

    Required: id
    Everything else falls back to the table defaults.
    """

    id: int = Field(..., gt=0, description="External catalog id (natural key)")
    name: str = Field(DEFAULT_PRODUCT_NAME, description="Product name")
    brand: str = Field(DEFAULT_BRAND, description="Brand / manufacturer")
    article: Optional[str] = Field(None, description="Manufacturer article")
    brand_code: str = Field(DEFAULT_BRAND_CODE, description="Brand product code")
    cli_code: Optional[str] = Field(None, description="Client code")
    class_name: str = Field(DEFAULT_CLASS, description="Product class")
    class_code: int = Field(DEFAULT_CLASS_CODE, description="Numeric class code")

    def to_row(self) -> dict:
        """Convert to the catalog table layout."""
        return {
            "id": self.id,
            "name": self.name or DEFAULT_PRODUCT_NAME,
            "brand": self.brand or DEFAULT_BRAND,
            "article": self.article or None,
            "brand_code": self.brand_code or DEFAULT_BRAND_CODE,
            "cli_code": self.cli_code or None,
            "class": self.class_name or DEFAULT_CLASS,
            "class_code": self.class_code or DEFAULT_CLASS_CODE,
        }

    @classmethod
    def from_row(cls, row: dict) -> "CatalogProduct":
        """Build from a catalog table row."""
        return cls(
            id=row["id"],
            name=row.get("name") or DEFAULT_PRODUCT_NAME,
            brand=row.get("brand") or DEFAULT_BRAND,
            article=row.get("article"),
            brand_code=row.get("brand_code") or DEFAULT_BRAND_CODE,
            cli_code=row.get("cli_code"),
            class_name=row.get("class") or DEFAULT_CLASS,
            class_code=row.get("class_code") or DEFAULT_CLASS_CODE,
        )
