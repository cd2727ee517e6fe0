from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from src.orders.status import OrderStatus

class OrderItemBase(BaseModel):
    product_id: UUID
    quantity: int = Field(gt=0)
    # Price is never accepted from the client; it is read from the catalog

class OrderItemCreate(OrderItemBase):
    pass

class OrderItemResponse(OrderItemBase):
    unit_price: Decimal
    subtotal: Decimal
    product_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class OrderCreate(BaseModel):
    items: List[OrderItemCreate] = Field(min_length=1)

class OrderStatusUpdate(BaseModel):
    status: OrderStatus

class OrderResponse(BaseModel):
    order_id: UUID
    owner_id: UUID
    items: List[OrderItemResponse]
    status: OrderStatus
    total: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class OrderStatusEvent(BaseModel):
    """Payload fanned out to listeners after a status transition."""
    order_id: UUID
    owner_id: UUID
    status: OrderStatus
    timestamp: datetime
