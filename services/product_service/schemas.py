from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

Category = Literal["Belts", "Purses", "Bags"]


def _clean_features(features):
    if features is None:
        return features
    cleaned = [feature.strip() for feature in features]
    if any(not feature for feature in cleaned):
        raise ValueError("Features cannot contain empty strings")
    return cleaned


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    category: Category
    description: str = Field(min_length=1, max_length=2000)
    features: List[str] = []
    price: float = Field(ge=0)
    discount: float = Field(default=0, ge=0, le=100)
    in_stock: bool = True
    image_url: str = Field(min_length=1, max_length=500)

    @field_validator("features")
    @classmethod
    def strip_features(cls, features):
        return _clean_features(features)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    category: Optional[Category] = None
    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    features: Optional[List[str]] = None
    price: Optional[float] = Field(default=None, ge=0)
    discount: Optional[float] = Field(default=None, ge=0, le=100)
    in_stock: Optional[bool] = None
    image_url: Optional[str] = Field(default=None, min_length=1, max_length=500)

    @field_validator("features")
    @classmethod
    def strip_features(cls, features):
        return _clean_features(features)


class ProductResponse(BaseModel):
    id: int
    name: str
    category: str
    description: str
    features: List[str]
    price: float
    discount: float
    in_stock: bool
    image_url: str
    created_at: datetime

    class Config:
        from_attributes = True
