from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.responses import ApiResponse, ok
from shared.security.dependencies import get_current_user

from .schemas import (
    ProfileResponse,
    ReviewCreate,
    ReviewResponse,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)
from .service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def register(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    user = await AuthService.register(db, payload)
    return ok(user, "User registered successfully")


@router.post(
    "/login",
    response_model=ApiResponse[TokenResponse],
    summary="Authenticate and receive a JWT access token",
)
async def login(payload: UserLogin, db: AsyncSession = Depends(get_db)):
    return ok(await AuthService.login(db, payload), "Login successful")


@router.get(
    "/me",
    response_model=ApiResponse[ProfileResponse],
    summary="Get the current user's profile and order index",
)
async def get_me(
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(await AuthService.get_profile(db, user_id))


@router.put(
    "/me",
    response_model=ApiResponse[ProfileResponse],
    summary="Update the current user's profile details",
)
async def update_me(
    payload: UserUpdate,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await AuthService.update_profile(db, user_id, payload)
    return ok(profile, "User details updated successfully")


@router.post(
    "/review",
    response_model=ApiResponse[ReviewResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Leave a review of the store",
)
async def add_review(
    payload: ReviewCreate,
    user_id: int = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    review = await AuthService.add_review(db, user_id, payload)
    return ok(review, "Review added successfully")


@router.get(
    "/review",
    response_model=ApiResponse[List[ReviewResponse]],
    summary="List store reviews, newest first",
)
async def list_reviews(db: AsyncSession = Depends(get_db)):
    return ok(await AuthService.list_reviews(db))
