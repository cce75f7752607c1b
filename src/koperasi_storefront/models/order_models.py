"""Order, order item and checkout form models.

An Order strongly owns its OrderItems. Items capture the product name and unit
price at order time so later catalog edits or deletions never change
historical orders.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

DORMS: tuple[str, ...] = ("Abu Bakar", "Usman", "Umar", "Khodijah", "Fatimah", "Aisyah")


class OrderStatus(str, Enum):
    """Enumeration of order lifecycle states."""

    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    DELIVERING = "delivering"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DeliveryMethod(str, Enum):
    """How the student receives the order."""

    PICKUP = "pickup"
    DELIVERY = "delivery"


PAYMENT_LABELS: dict[DeliveryMethod, str] = {
    DeliveryMethod.PICKUP: "Pay at the cooperative",
    DeliveryMethod.DELIVERY: "Pay on delivery",
}


def _to_int(value: Any) -> int:
    # DynamoDB returns every number as Decimal
    return int(value) if isinstance(value, Decimal) else value


class CheckoutForm(BaseModel):
    """Student identity and delivery details entered at checkout."""

    student_name: str = Field(..., min_length=1, description="Full name of the student")
    student_dorm: str = Field(..., description="Dormitory name")
    room_number: str = Field(..., min_length=1, description="Room number")
    phone: str = Field(..., min_length=10, description="Phone / WhatsApp number")
    delivery_method: DeliveryMethod = Field(default=DeliveryMethod.PICKUP)
    delivery_address: str | None = Field(None, description="Building / floor details")
    delivery_time: str | None = Field(None, description="Requested pickup or delivery time")
    notes: str | None = Field(None, description="Free-form notes")

    @field_validator("student_name", "room_number", "phone")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject values made only of whitespace."""
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("student_dorm")
    @classmethod
    def validate_dorm(cls, v: str) -> str:
        """Validate that the dorm is one of the known dormitories."""
        if v not in DORMS:
            raise ValueError(f"student_dorm must be one of: {', '.join(DORMS)}")
        return v

    @field_validator("delivery_address", "delivery_time", "notes")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Normalise blank optional strings to None."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def validate_delivery_address(self) -> "CheckoutForm":
        """Require an address when the order is delivered."""
        if self.delivery_method == DeliveryMethod.DELIVERY and not self.delivery_address:
            raise ValueError("delivery_address is required for delivery orders")
        return self


class Order(BaseModel):
    """Durable order record created at checkout."""

    id: str | None = Field(None, description="Backend-assigned order identifier")
    user_id: str = Field(..., description="Owner actor identifier")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    status: OrderStatus = Field(default=OrderStatus.PENDING)
    delivery_method: DeliveryMethod
    delivery_address: str | None = None
    delivery_time: str | None = None
    student_name: str
    student_dorm: str
    room_number: str
    phone: str
    total_amount: int = Field(..., ge=0, description="Sum of item subtotals at submission")
    notes: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def payment_label(self) -> str:
        """Cash payment method shown to the student."""
        return PAYMENT_LABELS[self.delivery_method]

    @classmethod
    def from_checkout(cls, user_id: str, form: CheckoutForm, total_amount: int) -> "Order":
        """Build a new pending order from a validated checkout form.

        Args:
            user_id: Owner actor identifier
            form: Validated checkout form
            total_amount: Total computed from the cart snapshot

        Returns:
            Order: Unsaved order with status pending
        """
        return cls(
            user_id=user_id,
            status=OrderStatus.PENDING,
            total_amount=total_amount,
            **form.model_dump(),
        )

    def to_record(self) -> dict[str, Any]:
        """Convert to document store fields (without the id).

        Returns:
            dict: Record fields, optional values stored as null
        """
        return {
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
            "status": self.status.value,
            "delivery_method": self.delivery_method.value,
            "delivery_address": self.delivery_address,
            "delivery_time": self.delivery_time,
            "student_name": self.student_name,
            "student_dorm": self.student_dorm,
            "room_number": self.room_number,
            "phone": self.phone,
            "total_amount": self.total_amount,
            "notes": self.notes,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Order":
        """Create an Order from a document store record.

        Args:
            record: Record dictionary as returned by the document store

        Returns:
            Order: Parsed model instance
        """
        return cls(
            id=record["id"],
            user_id=record["user_id"],
            created_at=datetime.fromisoformat(record["created_at"]),
            status=OrderStatus(record["status"]),
            delivery_method=DeliveryMethod(record["delivery_method"]),
            delivery_address=record.get("delivery_address"),
            delivery_time=record.get("delivery_time"),
            student_name=record["student_name"],
            student_dorm=record["student_dorm"],
            room_number=record["room_number"],
            phone=record["phone"],
            total_amount=_to_int(record["total_amount"]),
            notes=record.get("notes"),
        )


class OrderItem(BaseModel):
    """Snapshot of one cart line belonging to an order."""

    id: str | None = Field(None, description="Backend-assigned item identifier")
    order_id: str = Field(..., description="Owning order identifier")
    product_id: str | None = Field(None, description="Product the line was added from")
    product_name: str = Field(..., description="Product name at order time")
    price: int = Field(..., ge=0, description="Unit price at order time")
    quantity: int = Field(..., gt=0, description="Quantity ordered")

    @property
    def subtotal(self) -> int:
        """Unit price multiplied by quantity."""
        return self.price * self.quantity

    def to_record(self) -> dict[str, Any]:
        """Convert to document store fields (without the id).

        Returns:
            dict: Record fields
        """
        return {
            "order_id": self.order_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "price": self.price,
            "quantity": self.quantity,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "OrderItem":
        """Create an OrderItem from a document store record.

        Args:
            record: Record dictionary as returned by the document store

        Returns:
            OrderItem: Parsed model instance
        """
        return cls(
            id=record["id"],
            order_id=record["order_id"],
            product_id=record.get("product_id"),
            product_name=record["product_name"],
            price=_to_int(record["price"]),
            quantity=_to_int(record["quantity"]),
        )


class OrderDetail(BaseModel):
    """An order together with its items."""

    order: Order
    items: list[OrderItem]
