import uuid
from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, String, Text, Integer, Numeric, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from src.data.database import Base
from src.orders.status import OrderStatus

def utcnow():
    return datetime.now(timezone.utc)

class User(Base):
    # Owned by the identity service; orders only need the address to notify
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)

class Product(Base):
    # Owned by the catalog; orders read it through CatalogLookup only
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(100), nullable=False, default="")
    stock = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

class Order(Base):
    __tablename__ = "orders"

    order_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(50), nullable=False, default=OrderStatus.PENDING.value)
    total = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    owner = relationship("User", lazy="selectin")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )

class OrderItem(Base):
    __tablename__ = "order_items"

    item_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id = Column(Uuid, ForeignKey("orders.order_id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Uuid, ForeignKey("products.id"), nullable=False)
    # line number within the order, keeps items in the order they were placed
    position = Column(Integer, nullable=False, default=0)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product", lazy="selectin")

    @property
    def product_name(self):
        return self.product.name if self.product is not None else None
