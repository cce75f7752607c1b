"""Service settings read from environment variables."""

import os

from pydantic import BaseModel, Field

from koperasi_storefront.backend.backend_client import (
    ORDER_ITEMS,
    ORDERS,
    PRODUCT_IMAGES_BUCKET,
    PRODUCTS,
    PROFILES,
    USER_ROLES,
)

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE_VALUES


class StorefrontSettings(BaseModel):
    """Runtime configuration of the storefront service."""

    backend_endpoint: str = Field(..., description="Base URL of the hosted account API")
    backend_project_id: str = Field(..., description="Project identifier of the hosted backend")

    aws_region: str = Field(default="us-east-1")
    dynamodb_endpoint: str | None = Field(None, description="Local DynamoDB endpoint for development")
    products_table: str = PRODUCTS
    orders_table: str = ORDERS
    order_items_table: str = ORDER_ITEMS
    user_roles_table: str = USER_ROLES
    profiles_table: str = PROFILES

    s3_endpoint: str | None = Field(None, description="Local S3 endpoint for development")
    product_images_bucket: str = PRODUCT_IMAGES_BUCKET
    product_images_public_url: str | None = Field(None, description="Public base URL of product images")

    strict_status_transitions: bool = False
    log_level: str = "INFO"
    environment: str = "development"
    otel_enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def table_names(self) -> dict[str, str]:
        """Collection name to DynamoDB table name."""
        return {
            PRODUCTS: self.products_table,
            ORDERS: self.orders_table,
            ORDER_ITEMS: self.order_items_table,
            USER_ROLES: self.user_roles_table,
            PROFILES: self.profiles_table,
        }

    @classmethod
    def from_env(cls) -> "StorefrontSettings":
        """Build settings from the process environment.

        Returns:
            StorefrontSettings: Populated settings

        Raises:
            ValueError: If BACKEND_ENDPOINT or BACKEND_PROJECT_ID is missing
        """
        endpoint = os.getenv("BACKEND_ENDPOINT")
        project_id = os.getenv("BACKEND_PROJECT_ID")

        if not endpoint or not project_id:
            raise ValueError("BACKEND_ENDPOINT and BACKEND_PROJECT_ID must be set in environment")

        return cls(
            backend_endpoint=endpoint,
            backend_project_id=project_id,
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
            dynamodb_endpoint=os.getenv("DYNAMODB_ENDPOINT") or None,
            products_table=os.getenv("PRODUCTS_TABLE", PRODUCTS),
            orders_table=os.getenv("ORDERS_TABLE", ORDERS),
            order_items_table=os.getenv("ORDER_ITEMS_TABLE", ORDER_ITEMS),
            user_roles_table=os.getenv("USER_ROLES_TABLE", USER_ROLES),
            profiles_table=os.getenv("PROFILES_TABLE", PROFILES),
            s3_endpoint=os.getenv("S3_ENDPOINT") or None,
            product_images_bucket=os.getenv("PRODUCT_IMAGES_BUCKET", PRODUCT_IMAGES_BUCKET),
            product_images_public_url=os.getenv("PRODUCT_IMAGES_PUBLIC_URL") or None,
            strict_status_transitions=_env_flag("STRICT_STATUS_TRANSITIONS"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            environment=os.getenv("ENVIRONMENT", "development"),
            otel_enabled=_env_flag("OTEL_ENABLED", "true"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
        )
