"""
Order status state machine.

    processing -> shipped -> delivered
    processing -> cancelled

``delivered`` and ``cancelled`` are terminal. Entering a terminal state moves
the order from the owner's pending index to the completed one, in the same
commit as the status change.
"""
from datetime import datetime, timezone
from typing import Tuple

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import Forbidden, Internal, InvalidTransition, NotFound
from shared.observability import ecomm_order_transitions_total
from .domain import (
    TERMINAL_STATUSES,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ensure_transition,
    parse_status,
)
from .models import Order
from .repository import OrderIndexRepository, OrderRepository

logger = structlog.get_logger(__name__)


class OrderLifecycleService:

    @staticmethod
    async def _get(db: AsyncSession, order_id: int) -> Order:
        order = await OrderRepository.get_order(db, order_id)
        if not order:
            raise NotFound("Order not found")
        return order

    @staticmethod
    async def _apply(db: AsyncSession, order: Order, target: OrderStatus) -> str:
        order_id = order.id
        previous = order.order_status
        order.order_status = target.value
        order.updated_at = datetime.now(timezone.utc)

        # Cash is collected on delivery
        if target == OrderStatus.DELIVERED and order.payment_method == PaymentMethod.COD.value:
            order.payment_status = PaymentStatus.COMPLETED.value

        try:
            if target in TERMINAL_STATUSES:
                await OrderIndexRepository.move_to_completed(db, order)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error(
                "order.status_change_failed",
                order_id=order_id,
                from_status=previous,
                to_status=target.value,
                exc_info=exc,
            )
            raise Internal("Failed to update order status") from exc

        ecomm_order_transitions_total.labels(from_status=previous, to_status=target.value).inc()
        logger.info("order.status_changed", order_id=order.id, from_status=previous, to_status=target.value)
        return previous

    @staticmethod
    async def cancel(db: AsyncSession, order_id: int, requester_id: int) -> Order:
        order = await OrderLifecycleService._get(db, order_id)
        if order.user_id != requester_id:
            raise Forbidden()
        if order.order_status != OrderStatus.PROCESSING.value:
            raise InvalidTransition(
                f"Cannot cancel order with status: {order.order_status}. "
                "Only processing orders can be cancelled"
            )

        await OrderLifecycleService._apply(db, order, OrderStatus.CANCELLED)
        return order

    @staticmethod
    async def set_status(db: AsyncSession, order_id: int, new_status: str) -> Tuple[Order, str]:
        """Admin status change. Returns the order and the status it left."""
        target = parse_status(new_status)
        order = await OrderLifecycleService._get(db, order_id)
        ensure_transition(order.order_status, target)

        previous = await OrderLifecycleService._apply(db, order, target)
        return order, previous
