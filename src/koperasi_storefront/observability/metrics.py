"""Custom metrics for the storefront service."""

from opentelemetry import metrics

# Get meter for storefront service
meter = metrics.get_meter("storefront-svc")

orders_submitted_counter = meter.create_counter(
    name="orders_submitted_total",
    description="Total number of orders submitted by delivery method",
    unit="1",
)

order_submission_failure_counter = meter.create_counter(
    name="order_submission_failure_total",
    description="Total number of failed order submissions by reason",
    unit="1",
)

# Order value histogram, in rupiah
order_value_histogram = meter.create_histogram(
    name="order_value_rupiah",
    description="Total amount of submitted orders",
    unit="IDR",
)

order_status_change_counter = meter.create_counter(
    name="order_status_change_total",
    description="Total number of admin order status changes",
    unit="1",
)

access_denied_counter = meter.create_counter(
    name="access_denied_total",
    description="Total number of requests rejected by the access guard",
    unit="1",
)

image_cleanup_failure_counter = meter.create_counter(
    name="product_image_cleanup_failure_total",
    description="Total number of product images that could not be deleted",
    unit="1",
)


def record_order_submitted(delivery_method: str, total_amount: int) -> None:
    """Record a successfully submitted order.

    Args:
        delivery_method: "pickup" or "delivery"
        total_amount: Order total in rupiah
    """
    orders_submitted_counter.add(1, {"delivery_method": delivery_method})
    order_value_histogram.record(total_amount, {"delivery_method": delivery_method})


def record_order_submission_failure(reason: str) -> None:
    """Record a failed order submission.

    Args:
        reason: Failure category (e.g., "order_write", "item_write", "compensation")
    """
    order_submission_failure_counter.add(1, {"reason": reason})


def record_status_change(previous: str, current: str) -> None:
    """Record an admin status change.

    Args:
        previous: Status before the change
        current: Status after the change
    """
    order_status_change_counter.add(1, {"from": previous, "to": current})


def record_access_denied(reason: str) -> None:
    """Record a request rejected by the access guard.

    Args:
        reason: "auth_required" or "permission_denied"
    """
    access_denied_counter.add(1, {"reason": reason})


def record_image_cleanup_failure() -> None:
    """Record a product image that could not be deleted."""
    image_cleanup_failure_counter.add(1)
