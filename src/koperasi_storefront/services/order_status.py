"""Order status machine.

Nominal lifecycle: pending -> processing -> ready -> delivering -> completed,
with cancelled reachable from every non-terminal state. Admins may by default
set any status from any status; strict mode enforces the nominal table.
"""

from koperasi_storefront.exceptions import InvalidTransition
from koperasi_storefront.models.order_models import OrderStatus

TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.CANCELLED}
)

NOMINAL_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.DELIVERING, OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERING: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

STATUS_LABELS: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Order received",
    OrderStatus.PROCESSING: "Being prepared",
    OrderStatus.READY: "Ready for pickup",
    OrderStatus.DELIVERING: "Out for delivery",
    OrderStatus.COMPLETED: "Completed",
    OrderStatus.CANCELLED: "Cancelled",
}


def is_terminal(status: OrderStatus) -> bool:
    """Whether no further nominal transition leaves this status."""
    return status in TERMINAL_STATUSES


def is_nominal_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Whether target follows current in the nominal lifecycle."""
    return target in NOMINAL_TRANSITIONS[current]


def validate_transition(current: OrderStatus, target: OrderStatus, strict: bool = False) -> None:
    """Check a requested status change.

    Re-setting the current status is always accepted. Outside strict mode
    every move is accepted.

    Args:
        current: Status stored on the order
        target: Status requested by the admin
        strict: Enforce the nominal transition table

    Raises:
        InvalidTransition: In strict mode, if target does not follow current
    """
    if current == target or not strict:
        return
    if not is_nominal_transition(current, target):
        raise InvalidTransition(current.value, target.value)
