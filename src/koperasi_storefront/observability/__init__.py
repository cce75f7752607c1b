"""OpenTelemetry instrumentation and observability utilities."""

from koperasi_storefront.observability.config import configure_logging, setup_observability
from koperasi_storefront.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
