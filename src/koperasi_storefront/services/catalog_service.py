"""Read-only catalog access for the menu page."""

import asyncio
import logging

from koperasi_storefront.models.catalog_models import Product, ProductCategory
from koperasi_storefront.observability import traced
from koperasi_storefront.repositories.catalog_repositories import ProductRepository

logger = logging.getLogger(__name__)


class CatalogReader:
    """Fetches available products grouped by category."""

    def __init__(self, product_repository: ProductRepository) -> None:
        self.product_repository = product_repository

    @traced("list_catalog")
    async def list_available_by_category(self) -> dict[ProductCategory, list[Product]]:
        """Group the orderable products by category.

        Every category is present in display order, possibly with an empty
        list; products within a category are sorted by name.

        Returns:
            dict: Category to its available products
        """
        products = await asyncio.to_thread(self.product_repository.list_available)

        grouped: dict[ProductCategory, list[Product]] = {category: [] for category in ProductCategory}
        for product in products:
            if product.is_available:
                grouped[product.category].append(product)

        for items in grouped.values():
            items.sort(key=lambda p: p.name.lower())

        logger.debug(f"Catalog read: {len(products)} available products")
        return grouped
