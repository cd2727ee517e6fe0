"""Capabilities the order engine depends on.

The engine never talks to SQLAlchemy, SMTP or a broker directly; it is handed
objects satisfying these protocols. ``src.data`` provides the SQL-backed
catalog and repository, and the tests provide in-memory fakes.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Protocol
from uuid import UUID

from src.core.models import OrderStatusEvent
from src.data.models import Order


@dataclass(frozen=True)
class ProductInfo:
    id: UUID
    name: str
    price: Decimal
    available: bool
    stock: int


class CatalogLookup(Protocol):
    async def lookup_product(self, product_id: UUID) -> Optional[ProductInfo]:
        """Current price, availability and stock, or None if unknown."""
        ...


class OrderRepository(Protocol):
    async def create(self, order: Order) -> Order:
        """Persist an order together with its items in one transaction."""
        ...

    async def save_status(self, order_id: UUID, expected: str, status: str) -> Optional[Order]:
        """Conditional status write; None if the stored status is no longer ``expected``."""
        ...

    async def find(self, order_id: UUID, owner_id: Optional[UUID] = None) -> Optional[Order]:
        ...

    async def find_all(self, owner_id: Optional[UUID] = None) -> List[Order]:
        """Orders newest first, optionally restricted to one owner."""
        ...


class Broadcaster(Protocol):
    async def broadcast(self, event: OrderStatusEvent) -> None:
        ...


class Mailer(Protocol):
    async def send_order_status_update(self, address: str, order_id: UUID, status: str) -> None:
        ...
