from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.data.catalog import SqlAlchemyCatalog
from src.data.database import get_db
from src.data.repository import SqlAlchemyOrderRepository
from src.mail.service import email_service
from src.messaging.producer import producer
from src.orders.engine import OrderEngine
from src.orders.notifications import NotificationDispatcher
from src.realtime.gateway import gateway

ADMIN_ROLE = "admin"

@dataclass(frozen=True)
class ActingUser:
    # Identity is established upstream; we only receive the result
    id: UUID
    role: str = "customer"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

async def get_acting_user(
    x_user_id: UUID = Header(...),
    x_user_role: str = Header("customer"),
) -> ActingUser:
    return ActingUser(id=x_user_id, role=x_user_role.lower())

async def require_admin(user: ActingUser = Depends(get_acting_user)) -> ActingUser:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return user

def get_dispatcher() -> NotificationDispatcher:
    broadcasters = [gateway]
    if settings.BROKER_ENABLED:
        broadcasters.append(producer)
    return NotificationDispatcher(broadcasters, mailer=email_service)

async def get_engine(
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> OrderEngine:
    return OrderEngine(SqlAlchemyCatalog(db), SqlAlchemyOrderRepository(db), dispatcher)
