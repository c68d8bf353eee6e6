from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import Settings, get_settings
from shared.responses import ApiResponse, ok
from shared.security import CHECKOUT_RATE_LIMIT, get_current_user, limiter, require_admin
from .lifecycle import OrderLifecycleService
from .schemas import AllOrdersResponse, MyOrdersResponse, OrderCreate, OrderResponse, OrderStatusUpdate
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("/create", response_model=ApiResponse[OrderResponse], status_code=status.HTTP_201_CREATED)
@limiter.limit(CHECKOUT_RATE_LIMIT)
async def create_order(
    request: Request,
    payload: OrderCreate,
    user_id: int = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    order = await OrderService.place_order(db, user_id, payload, settings.razorpay_key_secret)
    return ok(order, "Order placed successfully")


@router.get("/myOrder", response_model=ApiResponse[MyOrdersResponse])
async def my_orders(
    order_status: Optional[str] = Query(default=None, alias="status"),
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(await OrderService.my_orders(db, user_id, order_status))


# Admin routes are declared before /{order_id} so "all" is not parsed as an id
@router.get("/all", response_model=ApiResponse[AllOrdersResponse], dependencies=[Depends(require_admin)])
async def all_orders(
    order_status: Optional[str] = Query(default=None, alias="status"),
    page: int = Query(default=1),
    limit: int = Query(default=20),
    db: AsyncSession = Depends(get_db),
):
    return ok(await OrderService.all_orders(db, order_status, page, limit))


@router.get("/{order_id}", response_model=ApiResponse[OrderResponse])
async def get_order(
    order_id: int,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(await OrderService.get_order(db, order_id, user_id))


@router.put("/{order_id}/cancel", response_model=ApiResponse[OrderResponse])
async def cancel_order(
    order_id: int,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    order = await OrderLifecycleService.cancel(db, order_id, user_id)
    return ok(order, "Order cancelled successfully")


@router.put(
    "/{order_id}/status",
    response_model=ApiResponse[OrderResponse],
    dependencies=[Depends(require_admin)],
)
async def update_order_status(
    order_id: int,
    change: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    order, previous = await OrderLifecycleService.set_status(db, order_id, change.status)
    return ok(order, f"Order status updated from {previous} to {order.order_status}")
