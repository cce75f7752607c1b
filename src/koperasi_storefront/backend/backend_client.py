"""Capability handle bundling the hosted backend collaborators.

A single BackendClient is constructed at process start and handed to every
repository and service that needs the backend.
"""

from dataclasses import dataclass, field

from koperasi_storefront.backend.document_store import DocumentStore
from koperasi_storefront.backend.object_store import ObjectStore
from koperasi_storefront.backend.session_client import SessionClient

PRODUCTS = "products"
ORDERS = "orders"
ORDER_ITEMS = "order_items"
USER_ROLES = "user_roles"
PROFILES = "profiles"

PRODUCT_IMAGES_BUCKET = "product-images"


@dataclass
class BackendClient:
    """Session service, document store and object store of the hosted backend.

    Attributes:
        sessions: Account / session service client
        documents: Document collections
        files: Object storage
        product_images_bucket: Bucket holding product images
    """

    sessions: SessionClient
    documents: DocumentStore
    files: ObjectStore
    product_images_bucket: str = field(default=PRODUCT_IMAGES_BUCKET)
