from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import InvalidInput, NotFound
from .models import Product
from .repository import ProductRepository
from .schemas import ProductCreate, ProductUpdate

logger = structlog.get_logger(__name__)


class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
        product = Product(**data.model_dump())
        product = await ProductRepository.create_product(db, product)
        logger.info("product.created", product_id=product.id, category=product.category)
        return product

    @staticmethod
    async def list_products(
        db: AsyncSession, category: Optional[str] = None, query: Optional[str] = None
    ):
        products = await ProductRepository.list_products(db, category)

        # Word-level match on the product name
        if query:
            query_words = set(query.lower().split())
            products = [p for p in products if query_words & set(p.name.lower().split())]

        return products

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int) -> Product:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise NotFound("Product not found")
        return product

    @staticmethod
    async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate) -> Product:
        product = await ProductService.get_product_by_id(db, product_id)

        changes = data.model_dump(exclude_unset=True)
        if any(value is None for value in changes.values()):
            raise InvalidInput("Product fields cannot be set to null")

        for field, value in changes.items():
            setattr(product, field, value)
        product.updated_at = datetime.now(timezone.utc)

        product = await ProductRepository.update_product(db, product)
        logger.info("product.updated", product_id=product.id, fields=sorted(changes))
        return product

    @staticmethod
    async def delete_product(db: AsyncSession, product_id: int) -> None:
        # Cart lines pointing at this product are dropped lazily on the next cart read
        product = await ProductService.get_product_by_id(db, product_id)
        await ProductRepository.delete_product(db, product)
        logger.info("product.deleted", product_id=product_id)
