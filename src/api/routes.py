from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket, status
from typing import List
from uuid import UUID

from src.api.dependencies import ActingUser, get_acting_user, get_engine, require_admin
from src.caching.redis_client import get_redis, RedisClient
from src.core.config import settings
from src.core.models import OrderCreate, OrderResponse, OrderStatusUpdate
from src.orders.engine import OrderEngine
from src.realtime.gateway import gateway

router = APIRouter(prefix="/api/orders", tags=["orders"])
ws_router = APIRouter(tags=["realtime"])

@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    request: Request,
    order_in: OrderCreate,
    user: ActingUser = Depends(get_acting_user),
    engine: OrderEngine = Depends(get_engine),
    redis: RedisClient = Depends(get_redis)
):
    client_ip = request.client.host if request.client else "unknown"
    allowed = await redis.check_rate_limit(
        client_ip,
        limit=settings.API_RATE_LIMIT_REQUESTS,
        window=settings.API_RATE_LIMIT_WINDOW_SECONDS
    )
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests"
        )

    return await engine.create_order(user.id, order_in.items)

@router.get("/", response_model=List[OrderResponse])
async def list_orders(
    user: ActingUser = Depends(get_acting_user),
    engine: OrderEngine = Depends(get_engine),
):
    return await engine.list_orders(None if user.is_admin else user.id)

@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    user: ActingUser = Depends(get_acting_user),
    engine: OrderEngine = Depends(get_engine),
    redis: RedisClient = Depends(get_redis)
):
    owner_id = None if user.is_admin else user.id

    cached_order = await redis.get_cached_order(str(order_id))
    if cached_order and (owner_id is None or cached_order.get("owner_id") == str(owner_id)):
        return cached_order

    order = await engine.get_order(order_id, owner_id)

    response_model = OrderResponse.model_validate(order)
    await redis.set_cached_order(str(order_id), response_model.model_dump(mode="json"))

    return response_model

@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    update: OrderStatusUpdate,
    user: ActingUser = Depends(require_admin),
    engine: OrderEngine = Depends(get_engine),
    redis: RedisClient = Depends(get_redis)
):
    order = await engine.update_status(order_id, update.status)
    await redis.invalidate_order(str(order_id))
    return order

@ws_router.websocket("/ws/orders")
async def orders_channel(websocket: WebSocket):
    await gateway.connect(websocket)
    try:
        while True:
            # listeners only receive; inbound text or binary frames are ignored
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        gateway.disconnect(websocket)
