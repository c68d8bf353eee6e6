from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .domain import PaymentMethod, ShippingAddress


class ShippingAddressIn(BaseModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    pincode: str = Field(min_length=1)
    phone: str = Field(min_length=1)

    class Config:
        str_strip_whitespace = True

    def to_value(self) -> ShippingAddress:
        return ShippingAddress(**self.model_dump())


class OrderCreate(BaseModel):
    shipping_address: ShippingAddressIn
    payment_method: PaymentMethod = PaymentMethod.COD
    # Required when payment_method is "online"
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: str


class ShippingAddressResponse(BaseModel):
    street: str
    city: str
    state: str
    pincode: str
    phone: str

    class Config:
        from_attributes = True


class OrderItemResponse(BaseModel):
    product_id: int
    item_name: str
    item_price: int
    quantity: int

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    user_id: int
    items: List[OrderItemResponse]
    total_amount: int
    order_status: str
    payment_status: str
    payment_method: str
    shipping_address: ShippingAddressResponse
    gateway_order_id: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StatusSummary(BaseModel):
    processing: int = 0
    shipped: int = 0
    delivered: int = 0
    cancelled: int = 0


class MyOrdersResponse(BaseModel):
    orders: List[OrderResponse]
    summary: StatusSummary
    total_orders: int


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_orders: int
    orders_per_page: int
    has_next_page: bool
    has_prev_page: bool


class AdminStatusSummary(StatusSummary):
    total: int = 0


class AllOrdersResponse(BaseModel):
    orders: List[OrderResponse]
    pagination: Pagination
    summary: AdminStatusSummary
    total_revenue: int
