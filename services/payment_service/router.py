from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.schemas import OrderResponse
from shared.config.database import get_db
from shared.config.settings import Settings, get_settings
from shared.responses import ApiResponse, ok
from shared.security import CHECKOUT_RATE_LIMIT, get_current_user, limiter
from .gateway import PaymentGateway
from .schemas import PaymentIntentCreate, PaymentIntentResponse, PaymentVerify
from .service import PaymentService

router = APIRouter(prefix="/orders/razorpay", tags=["Payments"])


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.gateway


@router.post("/create", response_model=ApiResponse[PaymentIntentResponse])
@limiter.limit(CHECKOUT_RATE_LIMIT)
async def create_payment_intent(
    request: Request,
    payload: PaymentIntentCreate,
    user_id: int = Depends(get_current_user),
    gateway: PaymentGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    intent = await PaymentService.create_intent(
        db, gateway, user_id, payload.shipping_address.to_value(), settings.currency
    )
    return ok(intent, "Razorpay order created successfully")


@router.post("/verify", response_model=ApiResponse[OrderResponse], status_code=status.HTTP_201_CREATED)
@limiter.limit(CHECKOUT_RATE_LIMIT)
async def verify_payment(
    request: Request,
    payload: PaymentVerify,
    user_id: int = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    order = await PaymentService.verify_payment(
        db,
        settings.razorpay_key_secret,
        user_id,
        payload.razorpay_order_id,
        payload.razorpay_payment_id,
        payload.razorpay_signature,
        payload.shipping_address.to_value(),
    )
    return ok(order, "Payment verified and order placed successfully")
