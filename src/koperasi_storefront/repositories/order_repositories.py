"""Repositories for orders and order items.

Orders and their items live in separate collections; items point at their
order through ``order_id``.
"""

from koperasi_storefront.backend.backend_client import ORDER_ITEMS, ORDERS
from koperasi_storefront.backend.document_store import DocumentStore
from koperasi_storefront.models.order_models import Order, OrderItem, OrderStatus
from koperasi_storefront.repositories.record_parsing import parse_record


class OrderRepository:
    """Repository for order CRUD operations."""

    def __init__(self, documents: DocumentStore, collection: str = ORDERS) -> None:
        """Initialize repository.

        Args:
            documents: Document store of the hosted backend
            collection: Name of the orders collection
        """
        self.documents = documents
        self.collection = collection

    def create_order(self, order: Order) -> Order:
        """Create an order; the backend assigns its id.

        Args:
            order: Unsaved order

        Returns:
            Order: The stored order including its id
        """
        record = self.documents.create_record(self.collection, order.to_record())
        return parse_record(Order, record, self.collection)

    def get_order(self, order_id: str) -> Order | None:
        """Retrieve an order by id.

        Args:
            order_id: Order identifier

        Returns:
            Order if found, None otherwise
        """
        record = self.documents.get_record(self.collection, order_id)
        if record is None:
            return None
        return parse_record(Order, record, self.collection)

    def list_orders_for_user(self, user_id: str) -> list[Order]:
        """List an actor's orders, newest first.

        Args:
            user_id: Owner actor identifier

        Returns:
            list: Orders (empty list if none found)
        """
        records = self.documents.list_records(
            self.collection,
            filters={"user_id": user_id},
            order_by="created_at",
            descending=True,
        )
        return [parse_record(Order, record, self.collection) for record in records]

    def list_all_orders(self) -> list[Order]:
        """List every order, newest first.

        Returns:
            list: Orders (empty list if none found)
        """
        records = self.documents.list_records(
            self.collection, order_by="created_at", descending=True
        )
        return [parse_record(Order, record, self.collection) for record in records]

    def update_status(self, order_id: str, status: OrderStatus) -> Order:
        """Set the status field of an order.

        Args:
            order_id: Order identifier
            status: New status

        Returns:
            Order: The order after the update
        """
        record = self.documents.update_record(
            self.collection, order_id, {"status": status.value}
        )
        return parse_record(Order, record, self.collection)

    def delete_order(self, order_id: str) -> None:
        """Delete an order record.

        Args:
            order_id: Order identifier
        """
        self.documents.delete_record(self.collection, order_id)


class OrderItemRepository:
    """Repository for order item CRUD operations."""

    def __init__(self, documents: DocumentStore, collection: str = ORDER_ITEMS) -> None:
        """Initialize repository.

        Args:
            documents: Document store of the hosted backend
            collection: Name of the order items collection
        """
        self.documents = documents
        self.collection = collection

    def create_item(self, item: OrderItem) -> OrderItem:
        """Create an order item.

        Args:
            item: Unsaved order item

        Returns:
            OrderItem: The stored item including its id
        """
        record = self.documents.create_record(self.collection, item.to_record())
        return parse_record(OrderItem, record, self.collection)

    def list_items_for_order(self, order_id: str) -> list[OrderItem]:
        """List the items of an order.

        Args:
            order_id: Owning order identifier

        Returns:
            list: Items (empty list if none found)
        """
        records = self.documents.list_records(self.collection, filters={"order_id": order_id})
        return [parse_record(OrderItem, record, self.collection) for record in records]

    def delete_item(self, item_id: str) -> None:
        """Delete an order item record.

        Args:
            item_id: Item identifier
        """
        self.documents.delete_record(self.collection, item_id)
