"""Shared dependency factory for the Lambda handler.

Dependencies are created once and reused across invocations within the same
Lambda container.
"""

import logging

from fastapi import FastAPI

from koperasi_storefront.backend.backend_client import BackendClient
from koperasi_storefront.bootstrap import (
    create_backend_client,
    create_dynamodb_resource,
    create_s3_client,
    create_storefront_app,
)
from koperasi_storefront.config import StorefrontSettings
from koperasi_storefront.observability import configure_logging

logger = logging.getLogger(__name__)

# Module-level caches for Lambda container reuse
_settings: StorefrontSettings | None = None
_backend_client: BackendClient | None = None
_fastapi_app: FastAPI | None = None


def get_settings() -> StorefrontSettings:
    """Read or retrieve cached settings.

    Raises:
        ValueError: If required configuration is missing
    """
    global _settings

    if _settings is None:
        _settings = StorefrontSettings.from_env()
    return _settings


def get_backend_client() -> BackendClient:
    """Create or retrieve the cached backend client.

    Returns:
        BackendClient with DynamoDB and S3 clients configured for environment
    """
    global _backend_client

    if _backend_client is not None:
        return _backend_client

    settings = get_settings()
    _backend_client = create_backend_client(
        settings,
        dynamodb_resource=create_dynamodb_resource(settings),
        s3_client=create_s3_client(settings),
    )

    logger.info("Backend client initialized")
    return _backend_client


def get_fastapi_app() -> FastAPI:
    """Create or retrieve cached FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    global _fastapi_app

    if _fastapi_app is not None:
        return _fastapi_app

    _fastapi_app = create_storefront_app(get_settings(), get_backend_client())

    logger.info("FastAPI application initialized")
    return _fastapi_app


def initialize_lambda_environment() -> None:
    """Initialize Lambda environment with logging.

    Should be called once during Lambda cold start.
    """
    configure_logging(get_settings().log_level)

    logger.info("Lambda environment initialized")
