import math
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from services.payment_service.signature import verify_signature
from shared.errors import Forbidden, Internal, InvalidInput, NotFound
from .checkout import CheckoutService
from .domain import CashOnDelivery, OrderStatus, PaymentMethod, PrepaidCard, parse_status
from .models import Order
from .repository import OrderRepository
from .schemas import (
    AdminStatusSummary,
    AllOrdersResponse,
    MyOrdersResponse,
    OrderCreate,
    OrderResponse,
    Pagination,
    StatusSummary,
)


class OrderService:
    @staticmethod
    def resolve_confirmation(data: OrderCreate, gateway_secret: str):
        """Maps the requested payment method onto a checkout confirmation.

        ``online`` is accepted here only with a gateway callback whose
        signature verifies; without one there is no proof of payment.
        """
        if data.payment_method == PaymentMethod.COD:
            return CashOnDelivery()
        if data.payment_method == PaymentMethod.CARD:
            return PrepaidCard()

        if not (data.razorpay_order_id and data.razorpay_payment_id and data.razorpay_signature):
            raise InvalidInput(
                "Online payments need razorpay_order_id, razorpay_payment_id and razorpay_signature"
            )
        if not gateway_secret:
            raise Internal("Payment gateway is not configured")
        return verify_signature(
            data.razorpay_order_id, data.razorpay_payment_id, data.razorpay_signature, gateway_secret
        )

    @staticmethod
    async def place_order(db: AsyncSession, user_id: int, data: OrderCreate, gateway_secret: str) -> Order:
        confirmation = OrderService.resolve_confirmation(data, gateway_secret)
        return await CheckoutService.checkout(db, user_id, data.shipping_address.to_value(), confirmation)

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int, requester_id: int) -> Order:
        order = await OrderRepository.get_order(db, order_id)
        if not order:
            raise NotFound("Order not found")
        if order.user_id != requester_id:
            raise Forbidden()
        return order

    @staticmethod
    async def my_orders(db: AsyncSession, user_id: int, status: Optional[str] = None) -> MyOrdersResponse:
        if status:
            status = parse_status(status).value
        orders = await OrderRepository.list_orders(db, user_id=user_id, status=status)
        counts = await OrderRepository.count_by_status(db, user_id=user_id)
        return MyOrdersResponse(
            orders=[OrderResponse.model_validate(o) for o in orders],
            summary=StatusSummary(**counts),
            total_orders=len(orders),
        )

    @staticmethod
    async def all_orders(
        db: AsyncSession, status: Optional[str] = None, page: int = 1, limit: int = 20
    ) -> AllOrdersResponse:
        if status:
            status = parse_status(status).value
        if page < 1 or limit < 1:
            raise InvalidInput("page and limit must be positive integers")

        total_orders = await OrderRepository.count_orders(db, status)
        orders = await OrderRepository.list_orders(db, status=status, offset=(page - 1) * limit, limit=limit)
        total_pages = math.ceil(total_orders / limit)

        counts = await OrderRepository.count_by_status(db)
        return AllOrdersResponse(
            orders=[OrderResponse.model_validate(o) for o in orders],
            pagination=Pagination(
                current_page=page,
                total_pages=total_pages,
                total_orders=total_orders,
                orders_per_page=limit,
                has_next_page=page < total_pages,
                has_prev_page=page > 1,
            ),
            summary=AdminStatusSummary(total=sum(counts.values()), **counts),
            total_revenue=await OrderRepository.revenue(db, OrderStatus.DELIVERED.value),
        )
