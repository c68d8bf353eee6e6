"""
User directory: registration, login, the shopper profile and store reviews.

The profile carries the pending/completed order index maintained by the
order lifecycle; this service only reads it.
"""
from typing import List

import structlog
from fastapi import HTTPException, status
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.models import IndexBucket
from services.order_service.repository import OrderIndexRepository
from shared.errors import NotFound
from shared.security.jwt_handler import create_access_token

from .models import Review, User
from .repository import ReviewRepository, UserRepository
from .schemas import (
    OrderIndexResponse,
    ProfileResponse,
    ReviewCreate,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

logger = structlog.get_logger(__name__)


class AuthService:

    @staticmethod
    def _hash_password(password: str) -> str:
        return _pwd_context.hash(password)

    @staticmethod
    def _verify_password(plain: str, hashed: str) -> bool:
        return _pwd_context.verify(plain, hashed)

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate) -> User:
        existing = await UserRepository.get_by_email(db, data.email)
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered",
            )
        user = User(
            name=data.name.strip(),
            email=data.email.lower(),
            hashed_password=AuthService._hash_password(data.password),
        )
        user = await UserRepository.create(db, user)
        logger.info("user.registered", user_id=user.id)
        return user

    @staticmethod
    async def login(db: AsyncSession, data: UserLogin) -> TokenResponse:
        user = await UserRepository.get_by_email(db, data.email)
        if not user or not AuthService._verify_password(data.password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is disabled",
            )
        return TokenResponse(access_token=create_access_token(user.id))

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: int) -> User:
        user = await UserRepository.get_by_id(db, user_id)
        if not user:
            raise NotFound("User not found")
        return user

    @staticmethod
    async def get_profile(db: AsyncSession, user_id: int) -> ProfileResponse:
        user = await AuthService.get_user_by_id(db, user_id)
        entries = await OrderIndexRepository.list_for_user(db, user_id)

        pending = [OrderIndexResponse.model_validate(e) for e in entries if e.bucket == IndexBucket.PENDING]
        completed = [OrderIndexResponse.model_validate(e) for e in entries if e.bucket == IndexBucket.COMPLETED]
        return ProfileResponse(
            **UserResponse.model_validate(user).model_dump(),
            pending_orders=pending,
            completed_orders=completed,
        )

    @staticmethod
    async def update_profile(db: AsyncSession, user_id: int, data: UserUpdate) -> ProfileResponse:
        user = await AuthService.get_user_by_id(db, user_id)
        changes = data.changes()
        for field, value in changes.items():
            setattr(user, field, value)
        await UserRepository.update(db, user)
        logger.info("user.updated", user_id=user_id, fields=sorted(changes))
        return await AuthService.get_profile(db, user_id)

    @staticmethod
    async def add_review(db: AsyncSession, user_id: int, data: ReviewCreate) -> Review:
        user = await AuthService.get_user_by_id(db, user_id)
        review = Review(user_id=user.id, rating=data.rating, comment=data.comment)
        review.user = user
        review = await ReviewRepository.create(db, review)
        logger.info("review.added", user_id=user_id, review_id=review.id, rating=review.rating)
        return review

    @staticmethod
    async def list_reviews(db: AsyncSession) -> List[Review]:
        return await ReviewRepository.list_reviews(db)
