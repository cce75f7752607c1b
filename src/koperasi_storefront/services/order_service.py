"""Order tracking for students and order management for admins."""

import asyncio
import logging

from koperasi_storefront.auth.access_guard import AccessGuard
from koperasi_storefront.exceptions import NotFoundError
from koperasi_storefront.models.auth_models import Actor
from koperasi_storefront.models.order_models import Order, OrderDetail, OrderStatus
from koperasi_storefront.observability import traced
from koperasi_storefront.observability.metrics import record_status_change
from koperasi_storefront.repositories.order_repositories import (
    OrderItemRepository,
    OrderRepository,
)
from koperasi_storefront.services.order_status import validate_transition

logger = logging.getLogger(__name__)


class OrderService:
    """Reads orders and applies admin status changes.

    Status changes go through the order status machine. In the default
    free-form mode any status may be set from any status.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        order_item_repository: OrderItemRepository,
        access_guard: AccessGuard,
        strict_transitions: bool = False,
    ) -> None:
        """Initialize the OrderService.

        Args:
            order_repository: Repository for orders
            order_item_repository: Repository for order items
            access_guard: Guard used to let admins view any order
            strict_transitions: Enforce the nominal status transition table
        """
        self.order_repository = order_repository
        self.order_item_repository = order_item_repository
        self.access_guard = access_guard
        self.strict_transitions = strict_transitions

    async def list_orders_for_actor(self, actor: Actor) -> list[Order]:
        """Get the actor's own orders, newest first."""
        return await asyncio.to_thread(self.order_repository.list_orders_for_user, actor.id)

    async def list_all_orders(self) -> list[Order]:
        """Get every order, newest first (admin dashboard)."""
        return await asyncio.to_thread(self.order_repository.list_all_orders)

    @traced("get_order_detail")
    async def get_order_detail(self, actor: Actor, order_id: str) -> OrderDetail:
        """Get an order and its items.

        The owner and admins may view an order; for anyone else the order is
        reported as missing.

        Args:
            actor: Authenticated viewer
            order_id: Order identifier

        Returns:
            OrderDetail with the order and its items

        Raises:
            NotFoundError: If the order does not exist or is not visible
        """
        order = await asyncio.to_thread(self.order_repository.get_order, order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")

        if order.user_id != actor.id and not await self.access_guard.is_admin(actor):
            logger.warning(f"Actor {actor.id} requested order {order_id} owned by another actor")
            raise NotFoundError(f"Order {order_id} not found")

        items = await asyncio.to_thread(self.order_item_repository.list_items_for_order, order_id)
        return OrderDetail(order=order, items=items)

    @traced("update_order_status")
    async def update_status(self, order_id: str, status: OrderStatus) -> Order:
        """Set an order's status (admin action).

        Args:
            order_id: Order identifier
            status: Requested status

        Returns:
            Order: The order after the update

        Raises:
            NotFoundError: If the order does not exist
            InvalidTransition: In strict mode, if the move is not a nominal transition
            BackendWriteError: If the update failed
        """
        order = await asyncio.to_thread(self.order_repository.get_order, order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")

        validate_transition(order.status, status, strict=self.strict_transitions)

        updated = await asyncio.to_thread(self.order_repository.update_status, order_id, status)

        record_status_change(order.status.value, updated.status.value)
        logger.info(f"Order {order_id} status changed: {order.status.value} -> {updated.status.value}")
        return updated
