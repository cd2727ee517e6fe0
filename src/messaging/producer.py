import json
import logging
import uuid
from datetime import datetime, timezone
import aio_pika
from src.core.config import settings
from src.core.models import OrderStatusEvent

logger = logging.getLogger(__name__)

class OrderEventProducer:
    """Publishes order events on the ``orders`` topic exchange.

    Any service bound to the exchange hears every status change; nothing is
    stored for listeners that are not bound when the event goes out.
    """

    def __init__(self, url: str = settings.RABBITMQ_URL):
        self.url = url
        self.connection = None
        self.channel = None
        self.exchange = None

    async def connect(self):
        if not self.connection:
            try:
                self.connection = await aio_pika.connect_robust(self.url)
                self.channel = await self.connection.channel()
                self.exchange = await self.channel.declare_exchange(
                    "orders", aio_pika.ExchangeType.TOPIC, durable=True
                )
                logger.info("Connected to RabbitMQ for producing.")
            except Exception as e:
                self.connection = None
                logger.error(f"Failed to connect to RabbitMQ producer: {e}")
                raise

    async def close(self):
        if self.connection:
            await self.connection.close()
            self.connection = None
            self.exchange = None

    async def broadcast(self, event: OrderStatusEvent):
        if not self.exchange:
            await self.connect()

        envelope = {
            "event_type": "OrderStatusUpdated",
            "event_id": str(uuid.uuid4()),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "payload": event.model_dump(mode="json"),
        }

        message = aio_pika.Message(
            body=json.dumps(envelope).encode(),
            content_type="application/json",
        )

        routing_key = f"order.status.{event.status.value.lower()}"
        await self.exchange.publish(message, routing_key=routing_key)
        logger.info(f"Published OrderStatusUpdated event for order {event.order_id}")

producer = OrderEventProducer()
