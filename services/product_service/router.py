from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.responses import ApiResponse, ok
from shared.security.dependencies import require_admin
from .schemas import Category, ProductCreate, ProductResponse, ProductUpdate
from .service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])
admin_router = APIRouter(prefix="/products", tags=["Products"], dependencies=[Depends(require_admin)])


@router.get("/all", response_model=ApiResponse[List[ProductResponse]])
async def list_products(
    category: Optional[Category] = Query(default=None),
    query: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    products = await ProductService.list_products(db, category, query)
    return ok(products)


@router.get("/{product_id}", response_model=ApiResponse[ProductResponse])
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return ok(await ProductService.get_product_by_id(db, product_id))


@admin_router.post("", response_model=ApiResponse[ProductResponse], status_code=status.HTTP_201_CREATED)
async def create_product(product: ProductCreate, db: AsyncSession = Depends(get_db)):
    created = await ProductService.create_product(db, product)
    return ok(created, "Product created successfully")


@admin_router.put("/{product_id}", response_model=ApiResponse[ProductResponse])
async def update_product(product_id: int, changes: ProductUpdate, db: AsyncSession = Depends(get_db)):
    updated = await ProductService.update_product(db, product_id, changes)
    return ok(updated, "Product updated successfully")


@admin_router.delete("/{product_id}", response_model=ApiResponse[None])
async def delete_product(product_id: int, db: AsyncSession = Depends(get_db)):
    await ProductService.delete_product(db, product_id)
    return ok(message="Product deleted successfully")
