import logging
from decimal import Decimal
from typing import List, Optional, Sequence
from uuid import UUID

from src.core.models import OrderItemCreate
from src.data.models import Order, OrderItem
from src.orders.exceptions import (
    IllegalTransition,
    InsufficientStock,
    OrderNotFound,
    ProductNotFound,
    ProductUnavailable,
)
from src.orders.notifications import NotificationDispatcher
from src.orders.ports import CatalogLookup, OrderRepository
from src.orders.status import OrderStatus, ensure_transition

logger = logging.getLogger(__name__)


class OrderEngine:
    """Creates orders and moves them through their status lifecycle."""

    def __init__(
        self,
        catalog: CatalogLookup,
        repository: OrderRepository,
        dispatcher: NotificationDispatcher,
    ):
        self.catalog = catalog
        self.repository = repository
        self.dispatcher = dispatcher

    async def create_order(self, owner_id: UUID, items: Sequence[OrderItemCreate]) -> Order:
        """Validate every line against the catalog, then persist the order.

        Lines are checked one at a time in the order given and the first
        failure aborts the call before anything is written. Prices come from
        the catalog, never from the request.
        """
        order_items = []
        total = Decimal("0")

        for position, item in enumerate(items):
            product = await self.catalog.lookup_product(item.product_id)
            if product is None:
                raise ProductNotFound(item.product_id)
            if not product.available:
                raise ProductUnavailable(product.id, product.name)
            if product.stock < item.quantity:
                raise InsufficientStock(product.id, product.name, item.quantity, product.stock)

            subtotal = product.price * item.quantity
            total += subtotal

            order_items.append(
                OrderItem(
                    product_id=product.id,
                    position=position,
                    quantity=item.quantity,
                    unit_price=product.price,
                    subtotal=subtotal,
                )
            )

        order = Order(
            owner_id=owner_id,
            status=OrderStatus.PENDING.value,
            total=total,
            items=order_items,
        )
        saved = await self.repository.create(order)
        logger.info(f"Order {saved.order_id} created by user {owner_id}")
        return saved

    async def list_orders(self, owner_id: Optional[UUID] = None) -> List[Order]:
        return await self.repository.find_all(owner_id)

    async def get_order(self, order_id: UUID, owner_id: Optional[UUID] = None) -> Order:
        order = await self.repository.find(order_id, owner_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    async def update_status(self, order_id: UUID, status: OrderStatus) -> Order:
        order = await self.get_order(order_id)
        requested = ensure_transition(order.status, status)

        updated = await self.repository.save_status(order.order_id, order.status, requested.value)
        if updated is None:
            # someone else moved the order after we read it; judge against the new status
            latest = await self.get_order(order_id)
            raise IllegalTransition(latest.status, requested.value)
        logger.info(f"Order {order_id} status updated to {updated.status}")

        # persisted already; notification problems are logged, not raised
        await self.dispatcher.order_status_changed(updated)
        return updated
