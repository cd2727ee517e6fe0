import os

# keep the settings away from real infrastructure before anything imports them
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("BROKER_ENABLED", "false")
os.environ.setdefault("MAIL_ENABLED", "false")

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.data.models import User
from src.orders.engine import OrderEngine
from src.orders.notifications import NotificationDispatcher
from src.orders.ports import ProductInfo

PRODUCT_A = uuid.UUID("00000000-0000-0000-0000-00000000000a")
PRODUCT_B = uuid.UUID("00000000-0000-0000-0000-00000000000b")
PRODUCT_OFF_SALE = uuid.UUID("00000000-0000-0000-0000-00000000000c")
PRODUCT_LAST_UNIT = uuid.UUID("00000000-0000-0000-0000-00000000000d")
UNKNOWN_PRODUCT = uuid.UUID("00000000-0000-0000-0000-0000000000ff")

OWNER_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
OTHER_OWNER_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")


class FakeCatalog:
    def __init__(self, products):
        self.products = {p.id: p for p in products}
        self.lookups = []

    async def lookup_product(self, product_id):
        self.lookups.append(product_id)
        return self.products.get(product_id)


class InMemoryOrderRepository:
    """Mimics the SQL repository: assigns ids and timestamps, expands owner."""

    def __init__(self, users=()):
        self.users = {u.id: u for u in users}
        self.orders = {}
        self.saves = 0
        self.fail_on_save = False
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self):
        self._clock += timedelta(seconds=1)
        return self._clock

    async def create(self, order):
        order.order_id = uuid.uuid4()
        order.created_at = order.updated_at = self._tick()
        order.owner = self.users.get(order.owner_id)
        self.orders[order.order_id] = order
        return order

    async def save_status(self, order_id, expected, status):
        if self.fail_on_save:
            raise RuntimeError("database unavailable")
        order = self.orders.get(order_id)
        if order is None or order.status != expected:
            return None
        self.saves += 1
        order.status = status
        order.updated_at = self._tick()
        return order

    async def find(self, order_id, owner_id=None):
        order = self.orders.get(order_id)
        if order is None or (owner_id is not None and order.owner_id != owner_id):
            return None
        return order

    async def find_all(self, owner_id=None):
        orders = [o for o in self.orders.values() if owner_id is None or o.owner_id == owner_id]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)


class RecordingBroadcaster:
    def __init__(self):
        self.events = []

    async def broadcast(self, event):
        self.events.append(event)


class FailingBroadcaster:
    async def broadcast(self, event):
        raise ConnectionError("broker down")


class RecordingMailer:
    def __init__(self):
        self.sent = []

    async def send_order_status_update(self, address, order_id, status):
        self.sent.append((address, order_id, status))


class FailingMailer:
    async def send_order_status_update(self, address, order_id, status):
        raise OSError("SMTP connection refused")


@pytest.fixture
def products():
    return [
        ProductInfo(id=PRODUCT_A, name="Laptop Stand", price=Decimal("10.00"), available=True, stock=10),
        ProductInfo(id=PRODUCT_B, name="Wireless Mouse", price=Decimal("5.00"), available=True, stock=3),
        ProductInfo(id=PRODUCT_OFF_SALE, name="Old Keyboard", price=Decimal("20.00"), available=False, stock=50),
        ProductInfo(id=PRODUCT_LAST_UNIT, name="USB-C Hub", price=Decimal("49.99"), available=True, stock=1),
    ]


@pytest.fixture
def catalog(products):
    return FakeCatalog(products)


@pytest.fixture
def owner():
    return User(id=OWNER_ID, name="John Doe", email="customer@example.com")


@pytest.fixture
def repository(owner):
    other = User(id=OTHER_OWNER_ID, name="Jane Roe", email="jane@example.com")
    return InMemoryOrderRepository(users=[owner, other])


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def dispatcher(broadcaster, mailer):
    return NotificationDispatcher([broadcaster], mailer=mailer)


@pytest.fixture
def order_engine(catalog, repository, dispatcher):
    return OrderEngine(catalog, repository, dispatcher)
