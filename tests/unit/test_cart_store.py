"""Unit tests for the client-local cart store."""

import json
import random
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from koperasi_storefront.cart.cart_store import (
    CART_SLOT,
    CartStore,
    FileCartStorage,
    InMemoryCartStorage,
)
from koperasi_storefront.models.cart_models import CartLine
from koperasi_storefront.models.catalog_models import Product, ProductCategory


@pytest.mark.unit
class TestCartStore:
    """Test suite for CartStore mutations."""

    @pytest.fixture
    def storage(self) -> InMemoryCartStorage:
        """Create an empty in-memory storage."""
        return InMemoryCartStorage()

    @pytest.fixture
    def cart(self, storage: InMemoryCartStorage) -> CartStore:
        """Create an empty cart."""
        return CartStore(storage)

    def test_new_cart_is_empty(self, cart: CartStore) -> None:
        """Test that a cart with no persisted snapshot starts empty."""
        assert cart.is_empty()
        assert cart.total() == 0
        assert cart.item_count() == 0
        assert cart.snapshot() == []

    def test_add_creates_line_with_cached_product_fields(
        self, cart: CartStore, nasi_goreng: Product
    ) -> None:
        """Test that adding a product caches name, price and image on the line."""
        line = cart.add(nasi_goreng)

        assert line.id == "p1"
        assert line.name == "Nasi Goreng"
        assert line.price == 15000
        assert line.quantity == 1
        assert line.image_url == nasi_goreng.image_url

    def test_add_same_product_increments_quantity(
        self, cart: CartStore, nasi_goreng: Product
    ) -> None:
        """Test that a product appears at most once, with a growing quantity."""
        cart.add(nasi_goreng)
        line = cart.add(nasi_goreng)

        assert line.quantity == 2
        assert len(cart) == 1
        assert cart.total() == 30000

    def test_set_quantity_adjusts_by_delta(self, cart: CartStore, nasi_goreng: Product) -> None:
        """Test increasing and decreasing a line's quantity."""
        cart.add(nasi_goreng)

        assert cart.set_quantity("p1", 2).quantity == 3
        assert cart.set_quantity("p1", -1).quantity == 2

    def test_set_quantity_to_zero_removes_line(
        self, cart: CartStore, nasi_goreng: Product, es_teh: Product
    ) -> None:
        """Test that a quantity dropping to zero removes the line."""
        cart.add(nasi_goreng)
        cart.add(es_teh)

        result = cart.set_quantity("p1", -1)

        assert result is None
        assert [line.id for line in cart.snapshot()] == ["p2"]

    def test_set_quantity_below_zero_removes_line(self, cart: CartStore, es_teh: Product) -> None:
        """Test that a large negative delta removes rather than going negative."""
        cart.add(es_teh)

        assert cart.set_quantity("p2", -5) is None
        assert cart.is_empty()

    def test_set_quantity_unknown_product_is_noop(self, cart: CartStore) -> None:
        """Test adjusting a product that is not in the cart."""
        assert cart.set_quantity("missing", 1) is None
        assert cart.is_empty()

    def test_remove_drops_line_regardless_of_quantity(
        self, cart: CartStore, nasi_goreng: Product
    ) -> None:
        """Test removing a line with quantity above one."""
        cart.add(nasi_goreng)
        cart.add(nasi_goreng)

        cart.remove("p1")

        assert cart.is_empty()

    def test_clear_empties_cart_and_storage(
        self, cart: CartStore, storage: InMemoryCartStorage, nasi_goreng: Product
    ) -> None:
        """Test that clearing releases the storage slot."""
        cart.add(nasi_goreng)

        cart.clear()

        assert cart.is_empty()
        assert storage.get_item(CART_SLOT) is None

    def test_total_and_item_count(
        self, cart: CartStore, nasi_goreng: Product, es_teh: Product
    ) -> None:
        """Test totals over several lines."""
        cart.add(nasi_goreng)
        cart.add(nasi_goreng)
        cart.add(es_teh)

        assert cart.total() == 38000
        assert cart.item_count() == 3

    def test_snapshot_is_a_copy(self, cart: CartStore, es_teh: Product) -> None:
        """Test that mutating the cart does not change an earlier snapshot."""
        cart.add(es_teh)
        snapshot = cart.snapshot()

        cart.add(es_teh)

        assert snapshot[0].quantity == 1

    def test_random_mutations_keep_total_consistent(self) -> None:
        """Test that total always equals the sum of surviving line subtotals."""
        rng = random.Random(42)
        products = [
            Product(
                id=f"p{i}",
                name=f"Product {i}",
                price=1000 * (i + 1),
                category=ProductCategory.LIGHT_SNACK,
            )
            for i in range(5)
        ]
        cart = CartStore(InMemoryCartStorage())

        for _ in range(300):
            product = rng.choice(products)
            operation = rng.choice(["add", "set_quantity", "remove"])
            if operation == "add":
                cart.add(product)
            elif operation == "set_quantity":
                cart.set_quantity(product.id, rng.randint(-3, 3))
            else:
                cart.remove(product.id)

            lines = cart.snapshot()
            assert all(line.quantity > 0 for line in lines)
            assert cart.total() == sum(line.price * line.quantity for line in lines)
            assert len({line.id for line in lines}) == len(lines)


@pytest.mark.unit
class TestCartPersistence:
    """Test suite for cart snapshot persistence."""

    def test_reload_reproduces_lines(self, nasi_goreng: Product, es_teh: Product) -> None:
        """Test that a page refresh restores identical lines and quantities."""
        storage = InMemoryCartStorage()
        cart = CartStore(storage)
        cart.add(nasi_goreng)
        cart.add(nasi_goreng)
        cart.add(es_teh)

        reloaded = CartStore(storage)

        assert reloaded.snapshot() == cart.snapshot()

    def test_every_mutation_is_persisted(self, nasi_goreng: Product) -> None:
        """Test that the stored snapshot follows each mutation."""
        storage = InMemoryCartStorage()
        cart = CartStore(storage)

        cart.add(nasi_goreng)
        assert json.loads(storage.get_item(CART_SLOT))[0]["quantity"] == 1

        cart.set_quantity("p1", 1)
        assert json.loads(storage.get_item(CART_SLOT))[0]["quantity"] == 2

        cart.remove("p1")
        assert json.loads(storage.get_item(CART_SLOT)) == []

    def test_corrupt_snapshot_is_discarded(self) -> None:
        """Test that an unreadable snapshot yields an empty cart."""
        storage = InMemoryCartStorage()
        storage.set_item(CART_SLOT, "{not json")

        cart = CartStore(storage)

        assert cart.is_empty()

    def test_snapshot_with_invalid_line_is_discarded(self) -> None:
        """Test that a snapshot containing a non-positive quantity is rejected."""
        storage = InMemoryCartStorage()
        storage.set_item(
            CART_SLOT, json.dumps([{"id": "p1", "name": "Nasi", "price": 15000, "quantity": 0}])
        )

        cart = CartStore(storage)

        assert cart.is_empty()

    def test_storage_write_failure_keeps_in_memory_state(self, es_teh: Product) -> None:
        """Test that a failing storage does not lose the mutation."""
        storage = MagicMock()
        storage.get_item.return_value = None
        storage.set_item.side_effect = OSError("quota exceeded")

        cart = CartStore(storage)
        cart.add(es_teh)

        assert cart.item_count() == 1

    def test_file_storage_round_trip(self, tmp_path: Path, nasi_goreng: Product) -> None:
        """Test that the file-backed storage survives a new cart instance."""
        cart = CartStore(FileCartStorage(tmp_path))
        cart.add(nasi_goreng)

        reloaded = CartStore(FileCartStorage(tmp_path))

        assert reloaded.snapshot() == cart.snapshot()

        reloaded.clear()
        assert CartStore(FileCartStorage(tmp_path)).is_empty()

    def test_from_lines_merges_duplicate_products(self) -> None:
        """Test building a cart from submitted lines with a repeated product."""
        cart = CartStore.from_lines(
            [
                CartLine(id="p1", name="Nasi Goreng", price=15000, quantity=1),
                CartLine(id="p2", name="Es Teh", price=8000, quantity=1),
                CartLine(id="p1", name="Nasi Goreng", price=15000, quantity=1),
            ]
        )

        assert len(cart) == 2
        assert cart.total() == 38000
