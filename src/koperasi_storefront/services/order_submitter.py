"""Order submission: turns a cart snapshot and checkout form into an order."""

import asyncio
import logging
from dataclasses import dataclass

from koperasi_storefront.backend.session_client import SessionClient
from koperasi_storefront.cart.cart_store import CartStore
from koperasi_storefront.exceptions import (
    AuthRequired,
    BackendError,
    BackendWriteError,
    PartialWriteError,
    ValidationError,
)
from koperasi_storefront.models.cart_models import CartLine
from koperasi_storefront.models.order_models import CheckoutForm, Order, OrderItem
from koperasi_storefront.observability import traced
from koperasi_storefront.observability.metrics import (
    record_order_submission_failure,
    record_order_submitted,
)
from koperasi_storefront.repositories.order_repositories import (
    OrderItemRepository,
    OrderRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    """Result of a successful order submission.

    Attributes:
        order: The stored order
        items: The stored order items
        redirect_to: Detail view the client should navigate to
        message: Confirmation shown to the student
    """

    order: Order
    items: list[OrderItem]
    redirect_to: str
    message: str = "Order placed successfully!"


def compute_total(lines: list[CartLine]) -> int:
    """Sum of price times quantity over a cart snapshot."""
    return sum(line.price * line.quantity for line in lines)


class OrderSubmitter:
    """Writes one order and its items from a cart snapshot.

    The order is written first; items are then written in parallel. If any
    item write fails, the items that were written and the order itself are
    deleted again so no order is left without its items.
    """

    def __init__(
        self,
        session_client: SessionClient,
        order_repository: OrderRepository,
        order_item_repository: OrderItemRepository,
    ) -> None:
        """Initialize the OrderSubmitter.

        Args:
            session_client: Client used to resolve the current actor
            order_repository: Repository for orders
            order_item_repository: Repository for order items
        """
        self.session_client = session_client
        self.order_repository = order_repository
        self.order_item_repository = order_item_repository

    @traced("submit_order")
    async def submit(
        self, cart: CartStore, form: CheckoutForm, session_token: str | None
    ) -> SubmissionResult:
        """Submit the cart as an order.

        Steps:
        1. Reject an empty cart before any network call
        2. Resolve the current actor
        3. Compute the total from the snapshot
        4. Create the pending order
        5. Create all order items in parallel
        6. Clear the cart and return the confirmation

        Args:
            cart: Cart to submit; cleared only on success
            form: Validated checkout form
            session_token: Session secret of the student

        Returns:
            SubmissionResult with the stored order, items and redirect target

        Raises:
            ValidationError: If the cart is empty
            AuthRequired: If there is no valid session
            BackendWriteError: If the order could not be created (cart left intact)
            PartialWriteError: If a failed submission could not be rolled back
        """
        lines = cart.snapshot()
        if not lines:
            raise ValidationError("empty cart")

        actor = await self.session_client.get_current_session(session_token)
        if actor is None:
            raise AuthRequired()

        total = compute_total(lines)
        pending = Order.from_checkout(user_id=actor.id, form=form, total_amount=total)

        try:
            order = await asyncio.to_thread(self.order_repository.create_order, pending)
        except BackendError as e:
            logger.error(f"Failed to create order for actor {actor.id}: {e}")
            record_order_submission_failure("order_write")
            raise BackendWriteError("Failed to create order") from e

        items = await self._create_items(str(order.id), lines)

        cart.clear()
        record_order_submitted(order.delivery_method.value, order.total_amount)
        logger.info(
            f"Order {order.id} placed by {actor.id}: {len(items)} items, total {order.total_amount}"
        )

        return SubmissionResult(order=order, items=items, redirect_to=f"/orders/{order.id}")

    async def _create_items(
        self, order_id: str, lines: list[CartLine]
    ) -> list[OrderItem]:
        pending_items = [
            OrderItem(
                order_id=order_id,
                product_id=line.id,
                product_name=line.name,
                price=line.price,
                quantity=line.quantity,
            )
            for line in lines
        ]

        results = await asyncio.gather(
            *(asyncio.to_thread(self.order_item_repository.create_item, item) for item in pending_items),
            return_exceptions=True,
        )

        created = [r for r in results if isinstance(r, OrderItem)]
        failures = [r for r in results if isinstance(r, BaseException)]
        if not failures:
            return created

        logger.error(
            f"{len(failures)} of {len(pending_items)} item writes failed for order {order_id}, "
            f"rolling back: {failures[0]}"
        )
        record_order_submission_failure("item_write")
        await self._compensate(order_id, created)
        raise BackendWriteError("Failed to create order") from failures[0]

    async def _compensate(self, order_id: str, created_items: list[OrderItem]) -> None:
        try:
            await asyncio.gather(
                *(
                    asyncio.to_thread(self.order_item_repository.delete_item, item.id)
                    for item in created_items
                    if item.id is not None
                )
            )
            await asyncio.to_thread(self.order_repository.delete_order, order_id)
        except BackendError as e:
            logger.error(f"Rollback of order {order_id} failed, order left partially written: {e}")
            record_order_submission_failure("compensation")
            raise PartialWriteError(order_id) from e

        logger.info(f"Rolled back order {order_id} and {len(created_items)} items")
