"""Catalog data models.

Products are owned by the catalog and mutated only through the admin catalog
manager. Orders never hold a live reference back to a product.
"""

from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class ProductCategory(str, Enum):
    """Enumeration of product categories, in display order."""

    HEAVY_MEAL = "makanan_berat"
    LIGHT_SNACK = "makanan_ringan"
    BEVERAGE = "minuman"

    @property
    def label(self) -> str:
        """Human-readable category name."""
        return CATEGORY_LABELS[self]


CATEGORY_LABELS: dict[ProductCategory, str] = {
    ProductCategory.HEAVY_MEAL: "Makanan Berat",
    ProductCategory.LIGHT_SNACK: "Makanan Ringan",
    ProductCategory.BEVERAGE: "Minuman",
}


class ProductInput(BaseModel):
    """Editable product fields submitted by an admin."""

    name: str = Field(..., min_length=1, description="Product name")
    description: str | None = Field(None, description="Product description")
    price: int = Field(..., gt=0, description="Price in whole rupiah")
    category: ProductCategory = Field(..., description="Product category")
    is_available: bool = Field(default=True, description="Whether the product can be ordered")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject names made only of whitespace."""
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()


class Product(BaseModel):
    """Catalog product as stored in the products collection."""

    id: str = Field(..., description="Unique product identifier")
    name: str = Field(..., min_length=1, description="Product name")
    description: str | None = Field(None, description="Product description")
    price: int = Field(..., gt=0, description="Price in whole rupiah")
    category: ProductCategory = Field(..., description="Product category")
    is_available: bool = Field(default=True, description="Whether the product can be ordered")
    image_file_id: str | None = Field(None, description="Object store reference of the image")
    image_url: str | None = Field(None, description="Public URL of the image")

    def to_record(self) -> dict[str, Any]:
        """Convert to document store fields (without the id).

        Returns:
            dict: Record fields
        """
        record: dict[str, Any] = {
            "name": self.name,
            "price": self.price,
            "category": self.category.value,
            "is_available": self.is_available,
        }

        if self.description is not None:
            record["description"] = self.description

        if self.image_file_id is not None:
            record["image_file_id"] = self.image_file_id

        if self.image_url is not None:
            record["image_url"] = self.image_url

        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Product":
        """Create a Product from a document store record.

        Args:
            record: Record dictionary as returned by the document store

        Returns:
            Product: Parsed model instance
        """
        price = record["price"]
        if isinstance(price, Decimal):
            # DynamoDB returns every number as Decimal
            price = int(price)

        return cls(
            id=record["id"],
            name=record["name"],
            description=record.get("description"),
            price=price,
            category=ProductCategory(record["category"]),
            is_available=record.get("is_available", True),
            image_file_id=record.get("image_file_id"),
            image_url=record.get("image_url"),
        )
