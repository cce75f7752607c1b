"""Cart line model.

A cart line weakly references a product by id and caches the name, price and
image at add-time. Lines are serialized into the local cart slot.
"""

from pydantic import BaseModel, Field


class CartLine(BaseModel):
    """One product in the cart."""

    id: str = Field(..., description="Product identifier")
    name: str = Field(..., description="Product name at add-time")
    price: int = Field(..., gt=0, description="Unit price at add-time")
    quantity: int = Field(default=1, gt=0, description="Quantity in the cart")
    image_url: str | None = Field(None, description="Product image at add-time")

    @property
    def subtotal(self) -> int:
        """Unit price multiplied by quantity."""
        return self.price * self.quantity
