"""Main application entry point for the koperasi storefront service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os

from fastapi import FastAPI

from koperasi_storefront.bootstrap import (
    create_backend_client,
    create_dynamodb_resource,
    create_s3_client,
    create_storefront_app,
)
from koperasi_storefront.config import StorefrontSettings
from koperasi_storefront.observability import configure_logging, setup_observability

logger = logging.getLogger(__name__)


def create_application(settings: StorefrontSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Reads settings from the environment
    2. Configures logging
    3. Creates AWS clients and the backend client
    4. Creates repositories, services and the API
    5. Sets up observability

    Args:
        settings: Settings to use instead of the environment

    Returns:
        Configured FastAPI application instance

    Raises:
        ValueError: If required configuration is missing
    """
    settings = settings or StorefrontSettings.from_env()
    configure_logging(settings.log_level)

    logger.info("Initializing koperasi storefront service...")

    backend = create_backend_client(
        settings,
        dynamodb_resource=create_dynamodb_resource(settings),
        s3_client=create_s3_client(settings),
    )
    logger.info(f"Backend configured - endpoint: {settings.backend_endpoint}")

    app = create_storefront_app(settings, backend)

    if settings.otel_enabled:
        setup_observability(app)

    logger.info("Koperasi storefront service initialized successfully")
    return app


# Create the FastAPI application instance (only when not in test mode)
# This prevents the app from being created during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    # Create a placeholder app for test imports
    app = FastAPI()


if __name__ == "__main__":
    """Run the application with uvicorn when executed directly."""
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
