"""Repository for catalog products."""

from typing import Any

from koperasi_storefront.backend.backend_client import PRODUCTS
from koperasi_storefront.backend.document_store import DocumentStore
from koperasi_storefront.models.catalog_models import Product
from koperasi_storefront.repositories.record_parsing import parse_record


class ProductRepository:
    """Repository for product CRUD operations.

    Manages product records in the products collection keyed by ``id``.
    """

    def __init__(self, documents: DocumentStore, collection: str = PRODUCTS) -> None:
        """Initialize repository.

        Args:
            documents: Document store of the hosted backend
            collection: Name of the products collection
        """
        self.documents = documents
        self.collection = collection

    def list_available(self) -> list[Product]:
        """List products that can currently be ordered, ordered by category.

        Returns:
            list: Available products (empty list if none)
        """
        records = self.documents.list_records(
            self.collection, filters={"is_available": True}, order_by="category"
        )
        return [parse_record(Product, record, self.collection) for record in records]

    def list_all(self) -> list[Product]:
        """List every product, ordered by category.

        Returns:
            list: All products (empty list if none)
        """
        records = self.documents.list_records(self.collection, order_by="category")
        return [parse_record(Product, record, self.collection) for record in records]

    def get_product(self, product_id: str) -> Product | None:
        """Retrieve a product by id.

        Args:
            product_id: Product identifier

        Returns:
            Product if found, None otherwise
        """
        record = self.documents.get_record(self.collection, product_id)
        if record is None:
            return None
        return parse_record(Product, record, self.collection)

    def create_product(self, fields: dict[str, Any]) -> Product:
        """Create a product.

        Args:
            fields: Product fields without an id

        Returns:
            Product: The stored product
        """
        record = self.documents.create_record(self.collection, fields)
        return parse_record(Product, record, self.collection)

    def update_product(self, product_id: str, fields: dict[str, Any]) -> Product:
        """Update product fields.

        Args:
            product_id: Product identifier
            fields: Fields to change

        Returns:
            Product: The product after the update
        """
        record = self.documents.update_record(self.collection, product_id, fields)
        return parse_record(Product, record, self.collection)

    def delete_product(self, product_id: str) -> None:
        """Delete a product record.

        Args:
            product_id: Product identifier
        """
        self.documents.delete_record(self.collection, product_id)
