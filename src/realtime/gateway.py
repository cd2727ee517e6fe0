import asyncio
import logging
from typing import Set

from fastapi import WebSocket

from src.core.models import OrderStatusEvent

logger = logging.getLogger(__name__)

class OrdersGateway:
    """Live listeners on the ``orders`` channel.

    Pure fan-out: no acknowledgements and no replay for clients that connect
    after an event was sent.
    """

    def __init__(self):
        self.connections: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.connections.add(websocket)
        logger.info(f"Client connected: {websocket.client} ({len(self.connections)} listening)")

    def disconnect(self, websocket: WebSocket):
        self.connections.discard(websocket)
        logger.info(f"Client disconnected: {websocket.client}")

    async def broadcast(self, event: OrderStatusEvent):
        message = {"event": "orderStatusUpdate", "data": event.model_dump(mode="json")}
        listeners = list(self.connections)
        results = await asyncio.gather(
            *(ws.send_json(message) for ws in listeners), return_exceptions=True
        )
        for ws, result in zip(listeners, results):
            if isinstance(result, Exception):
                logger.warning(f"Dropping listener {ws.client}: {result}")
                self.connections.discard(ws)
        logger.info(f"Emitted order status update for order {event.order_id} to {len(listeners)} listeners")

gateway = OrdersGateway()
