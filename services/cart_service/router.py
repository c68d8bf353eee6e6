from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.responses import ApiResponse, ok
from shared.security.dependencies import get_current_user

from .schemas import CartItemCreate, CartItemUpdate, CartResponse
from .service import CartService

# Every cart route acts on the authenticated user's own cart
router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=ApiResponse[CartResponse])
async def get_cart(user_id: int = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return ok(await CartService.get_cart(db, user_id))


@router.post("/{product_id}", response_model=ApiResponse[CartResponse])
async def add_item(
    product_id: int,
    item: CartItemCreate = CartItemCreate(),
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    cart = await CartService.add_item(db, user_id, product_id, item.quantity)
    return ok(cart, "Product added to cart successfully")


@router.put("/{product_id}", response_model=ApiResponse[CartResponse])
async def update_item(
    product_id: int,
    change: CartItemUpdate,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    cart = await CartService.update_item(db, user_id, product_id, change.action, change.quantity)
    message = "Product removed from cart" if cart.removed else "Cart updated successfully"
    return ok(cart, message)


@router.delete("/{product_id}", response_model=ApiResponse[CartResponse])
async def remove_item(
    product_id: int,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    cart = await CartService.remove_item(db, user_id, product_id)
    return ok(cart, "Product removed from cart successfully")
