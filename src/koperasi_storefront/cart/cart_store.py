"""Client-local cart store.

The cart maps product id to a CartLine and is persisted as a JSON snapshot in a
single string-keyed storage slot after every mutation. It never talks to the
backend; it is turned into an order by the order submitter.
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from koperasi_storefront.models.cart_models import CartLine
from koperasi_storefront.models.catalog_models import Product

logger = logging.getLogger(__name__)

CART_SLOT = "cart"


class CartStorage(Protocol):
    """String-keyed durable storage holding serialized carts."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class InMemoryCartStorage:
    """Storage that lives as long as the object, used for request-scoped carts."""

    def __init__(self) -> None:
        self._slots: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._slots.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._slots[key] = value

    def remove_item(self, key: str) -> None:
        self._slots.pop(key, None)


class FileCartStorage:
    """Storage that keeps each slot in a JSON file under a directory.

    Survives process restarts, the equivalent of browser local storage for a
    command-line or desktop client.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class CartStore:
    """Cart keyed by product id with at most one line per product.

    Lines keep insertion order. Every mutation writes the full snapshot to the
    storage slot; write failures are logged and otherwise ignored.
    """

    def __init__(self, storage: CartStorage, slot: str = CART_SLOT) -> None:
        """Initialize the cart and load any persisted snapshot.

        Args:
            storage: Durable storage holding the cart slot
            slot: Key of the slot
        """
        self.storage = storage
        self.slot = slot
        self._lines: dict[str, CartLine] = {}
        self.load()

    @classmethod
    def from_lines(cls, lines: Iterable[CartLine], storage: CartStorage | None = None) -> "CartStore":
        """Build a cart from an existing snapshot.

        Lines for the same product are merged by adding their quantities.

        Args:
            lines: Cart lines, e.g. as submitted by a client at checkout
            storage: Storage to persist into, in-memory when omitted

        Returns:
            CartStore: The populated cart
        """
        cart = cls(storage or InMemoryCartStorage())
        cart._lines = {}
        for line in lines:
            existing = cart._lines.get(line.id)
            if existing:
                cart._lines[line.id] = existing.model_copy(
                    update={"quantity": existing.quantity + line.quantity}
                )
            else:
                cart._lines[line.id] = line.model_copy()
        cart._persist()
        return cart

    def load(self) -> None:
        """Replace the in-memory lines with the persisted snapshot."""
        raw = self.storage.get_item(self.slot)
        if not raw:
            self._lines = {}
            return

        try:
            lines = [CartLine.model_validate(item) for item in json.loads(raw)]
        except (ValueError, TypeError, PydanticValidationError) as e:
            logger.warning(f"Discarding unreadable cart snapshot: {e}")
            self._lines = {}
            return

        self._lines = {line.id: line for line in lines}

    def add(self, product: Product) -> CartLine:
        """Add one unit of a product.

        Args:
            product: Product to add; name, price and image are cached on the line

        Returns:
            CartLine: The line after the change
        """
        existing = self._lines.get(product.id)
        if existing:
            line = existing.model_copy(update={"quantity": existing.quantity + 1})
        else:
            line = CartLine(
                id=product.id,
                name=product.name,
                price=product.price,
                quantity=1,
                image_url=product.image_url,
            )
        self._lines[product.id] = line
        self._persist()
        return line

    def set_quantity(self, product_id: str, delta: int) -> CartLine | None:
        """Adjust the quantity of a line by delta.

        Args:
            product_id: Product identifier
            delta: Quantity change, may be negative

        Returns:
            The updated line, or None if the line was removed or never existed
        """
        existing = self._lines.get(product_id)
        if existing is None:
            return None

        new_quantity = existing.quantity + delta
        if new_quantity <= 0:
            del self._lines[product_id]
            self._persist()
            return None

        line = existing.model_copy(update={"quantity": new_quantity})
        self._lines[product_id] = line
        self._persist()
        return line

    def remove(self, product_id: str) -> None:
        """Remove a line regardless of its quantity."""
        self._lines.pop(product_id, None)
        self._persist()

    def clear(self) -> None:
        """Empty the cart and release its storage slot."""
        self._lines = {}
        try:
            self.storage.remove_item(self.slot)
        except OSError as e:
            logger.warning(f"Failed to clear cart storage: {e}")

    def snapshot(self) -> list[CartLine]:
        """Copy of the lines at this instant."""
        return [line.model_copy() for line in self._lines.values()]

    def total(self) -> int:
        """Sum of price times quantity over all lines."""
        return sum(line.subtotal for line in self._lines.values())

    def item_count(self) -> int:
        """Sum of quantities over all lines."""
        return sum(line.quantity for line in self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def _persist(self) -> None:
        payload = json.dumps([line.model_dump() for line in self._lines.values()])
        try:
            self.storage.set_item(self.slot, payload)
        except OSError as e:
            logger.warning(f"Failed to persist cart: {e}")
