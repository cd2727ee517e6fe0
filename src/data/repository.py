import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
from sqlalchemy.future import select

from src.data.models import Order, utcnow

logger = logging.getLogger(__name__)

class SqlAlchemyOrderRepository:
    """Order storage on the async SQLAlchemy session of the current request.

    Relationships (owner, items, item product) are loaded eagerly by the
    mappers, so returned orders are safe to serialize outside the session.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, order: Order) -> Order:
        # order and its items go out in a single commit via the cascade
        self.session.add(order)
        await self._commit()
        return await self._reload(order.order_id)

    async def save_status(self, order_id: UUID, expected: str, status: str) -> Optional[Order]:
        """Move the order to ``status`` only if it is still at ``expected``.

        Returns None when another writer changed the status after it was
        read, in which case nothing is written.
        """
        stmt = (
            update(Order)
            .where(Order.order_id == order_id, Order.status == expected)
            .values(status=status, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
        except Exception:
            logger.error(f"Status update for order {order_id} failed, rolling back")
            await self.session.rollback()
            raise
        await self._commit()
        if result.rowcount == 0:
            logger.warning(f"Order {order_id} is no longer {expected}, status update skipped")
            return None
        return await self._reload(order_id)

    async def find(self, order_id: UUID, owner_id: Optional[UUID] = None) -> Optional[Order]:
        # populate_existing so a long-lived session never hands back a stale status
        stmt = (
            select(Order)
            .where(Order.order_id == order_id)
            .execution_options(populate_existing=True)
        )
        if owner_id is not None:
            stmt = stmt.where(Order.owner_id == owner_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_all(self, owner_id: Optional[UUID] = None) -> List[Order]:
        stmt = select(Order).order_by(Order.created_at.desc())
        if owner_id is not None:
            stmt = stmt.where(Order.owner_id == owner_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _commit(self):
        try:
            await self.session.commit()
        except Exception:
            logger.error("Order commit failed, rolling back")
            await self.session.rollback()
            raise

    async def _reload(self, order_id: UUID) -> Order:
        stmt = (
            select(Order)
            .where(Order.order_id == order_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
