"""Admin catalog management: product CRUD with image assets."""

import asyncio
import logging
from dataclasses import dataclass

from koperasi_storefront.backend.object_store import ObjectStore
from koperasi_storefront.exceptions import BackendWriteError, NotFoundError, StorefrontError
from koperasi_storefront.models.catalog_models import Product, ProductInput
from koperasi_storefront.observability import traced
from koperasi_storefront.observability.metrics import record_image_cleanup_failure
from koperasi_storefront.repositories.catalog_repositories import ProductRepository

logger = logging.getLogger(__name__)


@dataclass
class ImageUpload:
    """A product image supplied by an admin.

    Attributes:
        data: File contents
        filename: Original filename
        content_type: MIME type reported by the client
    """

    data: bytes
    filename: str | None = None
    content_type: str | None = None


class AdminCatalogManager:
    """Creates, updates, deletes and toggles products.

    Image deletion is best-effort: a dangling image never blocks a product
    delete or update.
    """

    def __init__(
        self,
        product_repository: ProductRepository,
        object_store: ObjectStore,
        images_bucket: str,
    ) -> None:
        """Initialize the AdminCatalogManager.

        Args:
            product_repository: Repository for products
            object_store: Object storage for product images
            images_bucket: Bucket holding product images
        """
        self.product_repository = product_repository
        self.object_store = object_store
        self.images_bucket = images_bucket

    async def list_products(self) -> list[Product]:
        """Get every product, available or not, ordered by category."""
        return await asyncio.to_thread(self.product_repository.list_all)

    @traced("save_product")
    async def save(
        self,
        product_input: ProductInput,
        image: ImageUpload | None = None,
        product_id: str | None = None,
    ) -> Product:
        """Create or update a product.

        A new image is uploaded before the product fields are written; without
        one the existing image reference is kept unchanged.

        Args:
            product_input: Editable product fields
            image: Optional new image
            product_id: Product to update, or None to create

        Returns:
            Product: The stored product

        Raises:
            NotFoundError: If product_id does not exist
            BackendWriteError: If the upload or the write failed
        """
        existing: Product | None = None
        if product_id is not None:
            existing = await asyncio.to_thread(self.product_repository.get_product, product_id)
            if existing is None:
                raise NotFoundError(f"Product {product_id} not found")

        fields = product_input.model_dump(mode="json")

        new_file_ref: str | None = None
        if image is not None:
            new_file_ref = await asyncio.to_thread(
                self.object_store.upload_file,
                self.images_bucket,
                image.data,
                image.filename,
                image.content_type,
            )
            fields["image_file_id"] = new_file_ref
            fields["image_url"] = self.object_store.get_public_url(self.images_bucket, new_file_ref)

        try:
            if existing is None:
                product = await asyncio.to_thread(self.product_repository.create_product, fields)
            else:
                product = await asyncio.to_thread(
                    self.product_repository.update_product, existing.id, fields
                )
        except StorefrontError:
            # Nothing references the fresh upload
            if new_file_ref is not None:
                await self._release_image(new_file_ref)
            raise

        if existing is None:
            logger.info(f"Product {product.id} created: {product.name}")
            return product

        logger.info(f"Product {product.id} updated")

        if new_file_ref is not None and existing.image_file_id:
            await self._release_image(existing.image_file_id)

        return product

    @traced("delete_product")
    async def delete(self, product_id: str) -> None:
        """Delete a product and, best-effort, its image.

        Args:
            product_id: Product identifier

        Raises:
            NotFoundError: If the product does not exist
            BackendWriteError: If the product record could not be deleted
        """
        product = await asyncio.to_thread(self.product_repository.get_product, product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")

        if product.image_file_id:
            await self._release_image(product.image_file_id)

        await asyncio.to_thread(self.product_repository.delete_product, product_id)
        logger.info(f"Product {product_id} deleted")

    @traced("toggle_product_availability")
    async def toggle_availability(self, product_id: str) -> Product:
        """Flip a product's availability flag.

        Args:
            product_id: Product identifier

        Returns:
            Product: The product after the update

        Raises:
            NotFoundError: If the product does not exist
        """
        product = await asyncio.to_thread(self.product_repository.get_product, product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")

        return await asyncio.to_thread(
            self.product_repository.update_product,
            product_id,
            {"is_available": not product.is_available},
        )

    async def _release_image(self, file_ref: str) -> None:
        try:
            await asyncio.to_thread(self.object_store.delete_file, self.images_bucket, file_ref)
        except BackendWriteError as e:
            logger.warning(f"Could not delete product image {file_ref}, leaving it behind: {e}")
            record_image_cleanup_failure()
