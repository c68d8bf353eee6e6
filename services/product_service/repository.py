from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from .models import Product

class ProductRepository:

    @staticmethod
    async def create_product(db: AsyncSession, product: Product) -> Product:
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def list_products(db: AsyncSession, category: Optional[str] = None):
        stmt = select(Product).order_by(Product.created_at.desc(), Product.id.desc())
        if category:
            stmt = stmt.where(Product.category == category)
        result = await db.execute(stmt)
        return result.scalars().all()

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int) -> Optional[Product]:
        result = await db.execute(select(Product).where(Product.id == product_id))
        return result.scalars().first()

    @staticmethod
    async def update_product(db: AsyncSession, product: Product) -> Product:
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def delete_product(db: AsyncSession, product: Product) -> None:
        await db.delete(product)
        await db.commit()
