"""Best-effort fan-out of order status changes.

A status change is committed before anything here runs. Each side effect is
isolated: a failing broadcaster or mail transport is logged and dropped, and
never reaches the caller of the status update.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from src.core.models import OrderStatusEvent
from src.data.models import Order
from src.orders.ports import Broadcaster, Mailer

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(self, broadcasters: Sequence[Broadcaster] = (), mailer: Optional[Mailer] = None):
        self.broadcasters = list(broadcasters)
        self.mailer = mailer

    async def order_status_changed(self, order: Order) -> None:
        try:
            event = OrderStatusEvent(
                order_id=order.order_id,
                owner_id=order.owner_id,
                status=order.status,
                timestamp=datetime.now(timezone.utc),
            )
        except Exception:
            logger.exception(f"Could not build status event for order {order.order_id}")
            return

        tasks = [self._broadcast(broadcaster, event) for broadcaster in self.broadcasters]
        if self.mailer is not None:
            tasks.append(self._email(order))
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.error(f"Notification for order {event.order_id} failed: {result}")

    async def _broadcast(self, broadcaster: Broadcaster, event: OrderStatusEvent):
        try:
            await broadcaster.broadcast(event)
        except Exception as e:
            logger.error(
                f"Broadcast via {type(broadcaster).__name__} failed for order {event.order_id}: {e}"
            )

    async def _email(self, order: Order):
        address = None
        try:
            address = order.owner.email if order.owner is not None else None
            if not address:
                logger.warning(f"Order {order.order_id} has no owner email, skipping notification")
                return
            await self.mailer.send_order_status_update(address, order.order_id, order.status)
        except Exception as e:
            logger.error(f"Failed to send email to {address} for order {order.order_id}: {e}")
