from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from services.product_service.models import Product
from .models import CartItem

class CartRepository:
    @staticmethod
    async def get_lines(db: AsyncSession, user_id: int):
        """Cart items in insertion order, each paired with its product (None if deleted)."""
        result = await db.execute(
            select(CartItem, Product)
            .outerjoin(Product, Product.id == CartItem.product_id)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.id)
        )
        return [(item, product) for item, product in result.all()]

    @staticmethod
    async def get_item(db: AsyncSession, user_id: int, product_id: int) -> Optional[CartItem]:
        result = await db.execute(
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .where(CartItem.product_id == product_id)
        )
        return result.scalars().first()

    @staticmethod
    async def add_item(db: AsyncSession, item: CartItem) -> CartItem:
        db.add(item)
        await db.flush()
        return item

    @staticmethod
    async def remove_item(db: AsyncSession, item: CartItem) -> None:
        await db.delete(item)
        await db.flush()

    @staticmethod
    async def remove_items(db: AsyncSession, item_ids: Iterable[int]) -> None:
        await db.execute(delete(CartItem).where(CartItem.id.in_(list(item_ids))))

    @staticmethod
    async def clear_cart(db: AsyncSession, user_id: int) -> None:
        """Deletes every line of the user's cart in one statement. Caller commits."""
        await db.execute(delete(CartItem).where(CartItem.user_id == user_id))
