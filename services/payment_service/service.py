"""
Two-step online payment.

1. ``create_intent`` prices the cart exactly as checkout would and opens a
   gateway order for that amount. No Order row exists yet.
2. ``verify_payment`` checks the gateway callback signature and only then
   runs checkout, so unpaid orders never reach the database.
"""
import json
import time
from dataclasses import asdict, dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.checkout import CheckoutService
from services.order_service.domain import ShippingAddress
from services.order_service.models import Order
from services.order_service.pricing import to_minor_units
from shared.errors import Internal, SignatureMismatch
from .gateway import GatewayError, PaymentGateway
from .signature import verify_signature

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PaymentIntent:
    order_id: str
    amount: int
    currency: str
    key_id: str


class PaymentService:
    @staticmethod
    async def create_intent(
        db: AsyncSession,
        gateway: PaymentGateway,
        user_id: int,
        address: ShippingAddress,
        currency: str = "INR",
    ) -> PaymentIntent:
        address.validate()
        quote = await CheckoutService.price_cart(db, user_id)

        receipt = f"receipt_{int(time.time() * 1000)}"
        try:
            gateway_order = await gateway.create_order(
                amount=to_minor_units(quote.total),
                currency=currency,
                receipt=receipt,
                notes={"userId": str(user_id), "shippingAddress": json.dumps(asdict(address))},
            )
        except GatewayError as exc:
            raise Internal("Failed to create Razorpay order") from exc

        logger.info("payment.intent_created", user_id=user_id, gateway_order_id=gateway_order.id, amount=quote.total)
        return PaymentIntent(
            order_id=gateway_order.id,
            amount=quote.total,
            currency=currency,
            key_id=gateway.key_id,
        )

    @staticmethod
    async def verify_payment(
        db: AsyncSession,
        secret: str,
        user_id: int,
        gateway_order_id: str,
        gateway_payment_id: str,
        signature: str,
        address: ShippingAddress,
    ) -> Order:
        if not secret:
            raise Internal("Payment gateway is not configured")

        try:
            confirmation = verify_signature(gateway_order_id, gateway_payment_id, signature, secret)
        except SignatureMismatch:
            logger.warning("payment.signature_mismatch", user_id=user_id, gateway_order_id=gateway_order_id)
            raise
        logger.info("payment.verified", user_id=user_id, gateway_order_id=gateway_order_id)
        return await CheckoutService.checkout(db, user_id, address, confirmation)
