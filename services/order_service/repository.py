"""
Order persistence. Methods flush but never commit: the calling service owns
the transaction so an order, its index entry and the cart clear land together.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import IndexBucket, Order, OrderIndexEntry


class OrderRepository:
    @staticmethod
    async def add(db: AsyncSession, order: Order) -> Order:
        db.add(order)
        await db.flush()
        return order

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Optional[Order]:
        result = await db.execute(select(Order).where(Order.id == order_id))
        return result.scalars().first()

    @staticmethod
    async def get_by_gateway_ids(db: AsyncSession, gateway_order_id: str, gateway_payment_id: str) -> Optional[Order]:
        result = await db.execute(
            select(Order).where(
                or_(Order.gateway_order_id == gateway_order_id, Order.gateway_payment_id == gateway_payment_id)
            )
        )
        return result.scalars().first()

    @staticmethod
    async def list_orders(
        db: AsyncSession,
        user_id: Optional[int] = None,
        status: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ):
        stmt = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        if status:
            stmt = stmt.where(Order.order_status == status)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return result.scalars().all()

    @staticmethod
    async def count_by_status(db: AsyncSession, user_id: Optional[int] = None) -> dict:
        stmt = select(Order.order_status, func.count(Order.id)).group_by(Order.order_status)
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        result = await db.execute(stmt)
        return {status: count for status, count in result.all()}

    @staticmethod
    async def count_orders(db: AsyncSession, status: Optional[str] = None) -> int:
        stmt = select(func.count(Order.id))
        if status:
            stmt = stmt.where(Order.order_status == status)
        return (await db.execute(stmt)).scalar_one()

    @staticmethod
    async def revenue(db: AsyncSession, status: str) -> int:
        stmt = select(func.coalesce(func.sum(Order.total_amount), 0)).where(Order.order_status == status)
        return int((await db.execute(stmt)).scalar_one())


class OrderIndexRepository:
    @staticmethod
    async def add_pending(db: AsyncSession, order: Order) -> OrderIndexEntry:
        entry = OrderIndexEntry(
            user_id=order.user_id,
            order_id=order.id,
            bucket=IndexBucket.PENDING.value,
            order_date=order.created_at,
        )
        db.add(entry)
        await db.flush()
        return entry

    @staticmethod
    async def move_to_completed(db: AsyncSession, order: Order) -> OrderIndexEntry:
        result = await db.execute(select(OrderIndexEntry).where(OrderIndexEntry.order_id == order.id))
        entry = result.scalars().first()
        if entry is None:
            # Index row missing (e.g. orders imported without one); recreate it
            entry = OrderIndexEntry(user_id=order.user_id, order_id=order.id, order_date=order.created_at)
            db.add(entry)
        entry.bucket = IndexBucket.COMPLETED.value
        entry.completed_date = datetime.now(timezone.utc)
        await db.flush()
        return entry

    @staticmethod
    async def list_for_user(db: AsyncSession, user_id: int):
        result = await db.execute(
            select(OrderIndexEntry)
            .where(OrderIndexEntry.user_id == user_id)
            .order_by(OrderIndexEntry.order_date, OrderIndexEntry.id)
        )
        return result.scalars().all()
