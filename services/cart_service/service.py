"""
Cart store: one line per (user, product), merged on repeat adds.

Every read drops lines whose product has been deleted from the catalog and
compacts the stored cart before answering.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.repository import UserRepository
from services.order_service import pricing
from services.product_service.models import Product
from services.product_service.repository import ProductRepository
from shared.errors import InvalidInput, NotFound, OutOfStock
from shared.observability import ecomm_cart_stale_items_total
from .models import CartItem
from .repository import CartRepository

logger = structlog.get_logger(__name__)


@dataclass
class CartLine:
    product_id: int
    quantity: int
    added_at: datetime
    product: Product


@dataclass
class CartSummary:
    total_items: int
    subtotal: int
    item_count: int


@dataclass
class CartView:
    items: List[CartLine] = field(default_factory=list)
    summary: CartSummary = field(default_factory=lambda: CartSummary(0, 0, 0))
    removed: Optional[bool] = None


class CartService:
    @staticmethod
    async def _require_user(db: AsyncSession, user_id: int) -> None:
        if not await UserRepository.get_by_id(db, user_id):
            raise NotFound("User not found")

    @staticmethod
    async def get_cart(db: AsyncSession, user_id: int) -> CartView:
        await CartService._require_user(db, user_id)
        lines = await CartRepository.get_lines(db, user_id)

        stale_ids = [item.id for item, product in lines if product is None]
        if stale_ids:
            await CartRepository.remove_items(db, stale_ids)
            await db.commit()
            ecomm_cart_stale_items_total.inc(len(stale_ids))
            logger.info("cart.compacted", user_id=user_id, dropped=len(stale_ids))

        live = [(item, product) for item, product in lines if product is not None]
        quote = pricing.quote((product, item.quantity) for item, product in live)
        return CartView(
            items=[CartLine(item.product_id, item.quantity, item.added_at, product) for item, product in live],
            summary=CartSummary(
                total_items=quote.total_items,
                subtotal=quote.total,
                item_count=len(live),
            ),
        )

    @staticmethod
    async def add_item(db: AsyncSession, user_id: int, product_id: int, quantity: int = 1) -> CartView:
        if quantity < 1:
            raise InvalidInput("Quantity must be at least 1")

        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise NotFound("Product not found")
        if not product.in_stock:
            raise OutOfStock()
        await CartService._require_user(db, user_id)

        item = await CartRepository.get_item(db, user_id, product_id)
        if item:
            item.quantity += quantity
            item.added_at = datetime.now(timezone.utc)
        else:
            item = await CartRepository.add_item(
                db, CartItem(user_id=user_id, product_id=product_id, quantity=quantity)
            )
        await db.commit()

        logger.info("cart.item_added", user_id=user_id, product_id=product_id, quantity=item.quantity)
        return await CartService.get_cart(db, user_id)

    @staticmethod
    async def update_item(
        db: AsyncSession, user_id: int, product_id: int, action: str, quantity: Optional[int] = None
    ) -> CartView:
        if action == "set" and (quantity is None or quantity < 0):
            raise InvalidInput("Quantity must be a non-negative number for 'set' action")
        if action not in ("increase", "decrease", "set"):
            raise InvalidInput("Action must be 'increase', 'decrease', or 'set'")

        await CartService._require_user(db, user_id)
        item = await CartRepository.get_item(db, user_id, product_id)
        if not item:
            raise NotFound("Product not found in cart")

        if action == "increase":
            new_quantity = item.quantity + 1
        elif action == "decrease":
            new_quantity = item.quantity - 1
        else:
            new_quantity = quantity

        removed = new_quantity <= 0
        if removed:
            await CartRepository.remove_item(db, item)
        else:
            item.quantity = new_quantity
        await db.commit()

        logger.info("cart.item_updated", user_id=user_id, product_id=product_id, action=action, removed=removed)
        view = await CartService.get_cart(db, user_id)
        view.removed = removed
        return view

    @staticmethod
    async def remove_item(db: AsyncSession, user_id: int, product_id: int) -> CartView:
        await CartService._require_user(db, user_id)
        item = await CartRepository.get_item(db, user_id, product_id)
        if not item:
            raise NotFound("Product not found in cart")

        await CartRepository.remove_item(db, item)
        await db.commit()

        logger.info("cart.item_removed", user_id=user_id, product_id=product_id)
        return await CartService.get_cart(db, user_id)
