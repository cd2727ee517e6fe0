from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from src.data.models import Product
from src.orders.ports import ProductInfo

class SqlAlchemyCatalog:
    """Reads products straight from the catalog tables.

    Lookups are never cached: stock must be read at the moment an order is
    admitted. There is no row lock either, so two concurrent orders may both
    pass the stock check for the last unit.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def lookup_product(self, product_id: UUID) -> Optional[ProductInfo]:
        result = await self.session.execute(select(Product).where(Product.id == product_id))
        product = result.scalar_one_or_none()
        if product is None:
            return None
        return ProductInfo(
            id=product.id,
            name=product.name,
            price=product.price,
            available=product.is_available,
            stock=product.stock,
        )
