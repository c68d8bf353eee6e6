"""
Checkout: turns the shopper's cart into an Order.

There is one routine for every payment method. What differs between cash on
delivery, card and a verified gateway payment is carried by the
``PaymentConfirmation`` passed in.

Validation runs before any write, so a rejected checkout never leaves a
partial order behind. The order, its index entry and the cart clear share a
single commit.
"""
import time

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.repository import UserRepository
from services.cart_service.repository import CartRepository
from shared.errors import DuplicatePayment, EmptyCart, Internal, NotFound, OutOfStock, ServiceError, StaleCartItem
from shared.observability import ecomm_checkout_duration_seconds, ecomm_checkout_total
from . import pricing
from .domain import OrderStatus, PaymentConfirmation, ShippingAddress, VerifiedGatewayPayment
from .models import Order, OrderItem
from .repository import OrderIndexRepository, OrderRepository

logger = structlog.get_logger(__name__)


class CheckoutService:

    @staticmethod
    async def price_cart(db: AsyncSession, user_id: int) -> pricing.CartQuote:
        """Validates every cart line against the live catalog and prices the cart.

        All-or-nothing: one stale or out-of-stock line rejects the whole cart.
        """
        if not await UserRepository.get_by_id(db, user_id):
            raise NotFound("User not found")

        lines = await CartRepository.get_lines(db, user_id)
        if not lines:
            raise EmptyCart()

        for item, product in lines:
            if product is None:
                raise StaleCartItem()
            if not product.in_stock:
                raise OutOfStock(f'Product "{product.name}" is out of stock')

        return pricing.quote((product, item.quantity) for item, product in lines)

    @staticmethod
    async def _ensure_payment_unused(db: AsyncSession, confirmation: VerifiedGatewayPayment) -> None:
        existing = await OrderRepository.get_by_gateway_ids(
            db, confirmation.gateway_order_id, confirmation.gateway_payment_id
        )
        if existing is not None:
            raise DuplicatePayment()

    @staticmethod
    async def checkout(
        db: AsyncSession,
        user_id: int,
        address: ShippingAddress,
        confirmation: PaymentConfirmation,
    ) -> Order:
        method = confirmation.method.value
        started = time.perf_counter()
        try:
            address.validate()
            if isinstance(confirmation, VerifiedGatewayPayment):
                await CheckoutService._ensure_payment_unused(db, confirmation)
            quote = await CheckoutService.price_cart(db, user_id)

            order = Order(
                user_id=user_id,
                total_amount=quote.total,
                order_status=OrderStatus.PROCESSING.value,
                payment_status=confirmation.status.value,
                payment_method=method,
                shipping_address=address,
                items=[OrderItem.from_snapshot(snapshot) for snapshot in quote.items],
            )
            if isinstance(confirmation, VerifiedGatewayPayment):
                order.gateway_order_id = confirmation.gateway_order_id
                order.gateway_payment_id = confirmation.gateway_payment_id
                order.gateway_signature = confirmation.gateway_signature

            await OrderRepository.add(db, order)
            await OrderIndexRepository.add_pending(db, order)
            await CartRepository.clear_cart(db, user_id)
            await db.commit()
        except ServiceError as exc:
            await db.rollback()
            ecomm_checkout_total.labels(status=exc.code, payment_method=method).inc()
            logger.info("checkout.rejected", user_id=user_id, payment_method=method, reason=exc.code)
            raise
        except IntegrityError as exc:
            # Lost a race on the unique gateway columns to a concurrent checkout
            await db.rollback()
            if not isinstance(confirmation, VerifiedGatewayPayment):
                ecomm_checkout_total.labels(status=Internal.code, payment_method=method).inc()
                logger.error("checkout.failed", user_id=user_id, payment_method=method, exc_info=exc)
                raise Internal("Failed to place order") from exc
            ecomm_checkout_total.labels(status=DuplicatePayment.code, payment_method=method).inc()
            logger.warning(
                "checkout.duplicate_payment",
                user_id=user_id,
                gateway_payment_id=confirmation.gateway_payment_id,
            )
            raise DuplicatePayment() from exc
        except SQLAlchemyError as exc:
            await db.rollback()
            ecomm_checkout_total.labels(status=Internal.code, payment_method=method).inc()
            logger.error("checkout.failed", user_id=user_id, payment_method=method, exc_info=exc)
            raise Internal("Failed to place order") from exc

        ecomm_checkout_total.labels(status="success", payment_method=method).inc()
        ecomm_checkout_duration_seconds.observe(time.perf_counter() - started)
        logger.info(
            "checkout.completed",
            user_id=user_id,
            order_id=order.id,
            total_amount=order.total_amount,
            payment_method=method,
        )
        return order
