from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    # Blank fields are left unchanged
    name: Optional[str] = Field(default=None, max_length=50)
    occupation: Optional[str] = Field(default=None, max_length=100)
    phone_number: Optional[str] = None
    street_address: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    pincode: Optional[str] = Field(default=None, max_length=10)

    class Config:
        str_strip_whitespace = True

    @field_validator("phone_number")
    @classmethod
    def ten_digit_phone(cls, phone_number):
        if phone_number and not (len(phone_number) == 10 and phone_number.isdigit()):
            raise ValueError("Phone number must be exactly 10 digits")
        return phone_number

    def changes(self) -> dict:
        return {field: value for field, value in self.model_dump().items() if value}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    is_active: bool
    occupation: Optional[str] = None
    phone_number: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None

    class Config:
        from_attributes = True


class OrderIndexResponse(BaseModel):
    order_id: int
    order_date: datetime
    completed_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileResponse(UserResponse):
    pending_orders: List[OrderIndexResponse] = []
    completed_orders: List[OrderIndexResponse] = []


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=1, max_length=1000)

    class Config:
        str_strip_whitespace = True


class ReviewerResponse(BaseModel):
    name: str
    occupation: Optional[str] = None

    class Config:
        from_attributes = True


class ReviewResponse(BaseModel):
    id: int
    rating: int
    comment: str
    created_at: datetime
    user: ReviewerResponse

    class Config:
        from_attributes = True
