from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class CartItemCreate(BaseModel):
    quantity: int = Field(default=1, ge=1)


class CartItemUpdate(BaseModel):
    action: Literal["increase", "decrease", "set"]
    quantity: Optional[int] = None


class CartProductResponse(BaseModel):
    id: int
    name: str
    category: str
    price: float
    discount: float
    in_stock: bool
    image_url: str

    class Config:
        from_attributes = True


class CartLineResponse(BaseModel):
    product_id: int
    quantity: int
    added_at: datetime
    product: CartProductResponse

    class Config:
        from_attributes = True


class CartSummary(BaseModel):
    total_items: int
    subtotal: int
    item_count: int

    class Config:
        from_attributes = True


class CartResponse(BaseModel):
    items: List[CartLineResponse] = []
    summary: CartSummary
    removed: Optional[bool] = None

    class Config:
        from_attributes = True
