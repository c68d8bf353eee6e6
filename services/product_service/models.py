from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String, Text
from shared.config.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    category = Column(String(20), nullable=False, index=True)  # Belts, Purses, Bags
    description = Column(Text, nullable=False)
    features = Column(JSON, nullable=False, default=list)
    price = Column(Float, nullable=False)
    discount = Column(Float, nullable=False, default=0.0)  # percent, 0-100
    in_stock = Column(Boolean, nullable=False, default=True)
    image_url = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
