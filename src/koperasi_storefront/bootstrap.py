"""Construction of the backend client, services and FastAPI application."""

import logging
from typing import Any

import boto3
from fastapi import FastAPI

from koperasi_storefront.auth.access_guard import AccessGuard
from koperasi_storefront.backend.backend_client import BackendClient
from koperasi_storefront.backend.document_store import DocumentStore
from koperasi_storefront.backend.object_store import ObjectStore
from koperasi_storefront.backend.session_client import SessionClient
from koperasi_storefront.config import StorefrontSettings
from koperasi_storefront.handlers.api_handler import create_app
from koperasi_storefront.repositories.account_repositories import (
    ProfileRepository,
    RoleRepository,
)
from koperasi_storefront.repositories.catalog_repositories import ProductRepository
from koperasi_storefront.repositories.order_repositories import (
    OrderItemRepository,
    OrderRepository,
)
from koperasi_storefront.services.admin_catalog_service import AdminCatalogManager
from koperasi_storefront.services.auth_service import AuthService
from koperasi_storefront.services.catalog_service import CatalogReader
from koperasi_storefront.services.order_service import OrderService
from koperasi_storefront.services.order_submitter import OrderSubmitter

logger = logging.getLogger(__name__)


def create_dynamodb_resource(settings: StorefrontSettings) -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    if settings.dynamodb_endpoint:
        # Local DynamoDB, credentials come from the environment
        logger.info(f"Using local DynamoDB at {settings.dynamodb_endpoint}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=settings.dynamodb_endpoint,
            region_name=settings.aws_region,
        )

    logger.info(f"Using AWS DynamoDB in region {settings.aws_region}")
    return boto3.resource("dynamodb", region_name=settings.aws_region)


def create_s3_client(settings: StorefrontSettings) -> Any:
    """Create S3 client, pointed at a local endpoint when one is configured."""
    if settings.s3_endpoint:
        logger.info(f"Using local S3 at {settings.s3_endpoint}")
        return boto3.client("s3", endpoint_url=settings.s3_endpoint, region_name=settings.aws_region)

    return boto3.client("s3", region_name=settings.aws_region)


def create_backend_client(
    settings: StorefrontSettings, dynamodb_resource: Any, s3_client: Any
) -> BackendClient:
    """Bundle the session service, document store and object store.

    Args:
        settings: Service settings
        dynamodb_resource: Boto3 DynamoDB resource
        s3_client: Boto3 S3 client

    Returns:
        BackendClient shared by every repository and service
    """
    public_urls = {}
    if settings.product_images_public_url:
        public_urls[settings.product_images_bucket] = settings.product_images_public_url

    return BackendClient(
        sessions=SessionClient(
            endpoint=settings.backend_endpoint, project_id=settings.backend_project_id
        ),
        documents=DocumentStore(dynamodb_resource, tables=settings.table_names),
        files=ObjectStore(s3_client, region=settings.aws_region, public_base_urls=public_urls),
        product_images_bucket=settings.product_images_bucket,
    )


def create_storefront_app(settings: StorefrontSettings, backend: BackendClient) -> FastAPI:
    """Create repositories and services and wire them into the API.

    Args:
        settings: Service settings
        backend: Hosted backend capability handle

    Returns:
        Configured FastAPI application
    """
    product_repository = ProductRepository(backend.documents)
    order_repository = OrderRepository(backend.documents)
    order_item_repository = OrderItemRepository(backend.documents)
    role_repository = RoleRepository(backend.documents)
    profile_repository = ProfileRepository(backend.documents)

    access_guard = AccessGuard(backend.sessions, role_repository)

    app = create_app(
        access_guard=access_guard,
        auth_service=AuthService(backend.sessions, access_guard, profile_repository),
        catalog_reader=CatalogReader(product_repository),
        order_submitter=OrderSubmitter(backend.sessions, order_repository, order_item_repository),
        order_service=OrderService(
            order_repository,
            order_item_repository,
            access_guard,
            strict_transitions=settings.strict_status_transitions,
        ),
        admin_catalog=AdminCatalogManager(
            product_repository, backend.files, backend.product_images_bucket
        ),
    )

    logger.info(
        f"Storefront application created (strict transitions: {settings.strict_status_transitions})"
    )
    return app
