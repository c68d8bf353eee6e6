from pydantic import BaseModel

from services.order_service.schemas import ShippingAddressIn


class PaymentIntentCreate(BaseModel):
    shipping_address: ShippingAddressIn


class PaymentIntentResponse(BaseModel):
    order_id: str
    amount: int  # major units; the gateway was sent amount * 100
    currency: str
    key_id: str

    class Config:
        from_attributes = True


class PaymentVerify(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    shipping_address: ShippingAddressIn
