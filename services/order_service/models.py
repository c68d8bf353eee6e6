from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import composite, relationship

from shared.config.database import Base
from .domain import LineItemSnapshot, OrderStatus, ShippingAddress


def _utcnow():
    return datetime.now(timezone.utc)


class IndexBucket(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    total_amount = Column(Integer, nullable=False)  # rounded once over all lines
    order_status = Column(String(20), nullable=False, default=OrderStatus.PROCESSING.value, index=True)
    payment_status = Column(String(20), nullable=False)
    payment_method = Column(String(20), nullable=False)

    shipping_street = Column(String(255), nullable=False)
    shipping_city = Column(String(100), nullable=False)
    shipping_state = Column(String(100), nullable=False)
    shipping_pincode = Column(String(20), nullable=False)
    shipping_phone = Column(String(20), nullable=False)
    shipping_address = composite(
        ShippingAddress,
        shipping_street,
        shipping_city,
        shipping_state,
        shipping_pincode,
        shipping_phone,
    )

    # Set only for online payments, from the verified gateway callback; each backs at most one order
    gateway_order_id = Column(String(64), nullable=True, unique=True)
    gateway_payment_id = Column(String(64), nullable=True, unique=True)
    gateway_signature = Column(String(128), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    items = relationship(
        "OrderItem",
        back_populates="order",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)  # not a FK: the product may be deleted later
    item_name = Column(String(100), nullable=False)
    item_price = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")

    @classmethod
    def from_snapshot(cls, snapshot: LineItemSnapshot) -> "OrderItem":
        return cls(
            product_id=snapshot.product_id,
            item_name=snapshot.name,
            item_price=snapshot.unit_price,
            quantity=snapshot.quantity,
        )

    def snapshot(self) -> LineItemSnapshot:
        return LineItemSnapshot(self.product_id, self.item_name, self.item_price, self.quantity)


class OrderIndexEntry(Base):
    """One row per order: the user's pending/completed order lists.

    ``order_id`` is unique, so an order sits in exactly one bucket.
    """

    __tablename__ = "order_index"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)
    bucket = Column(String(20), nullable=False, default=IndexBucket.PENDING.value)
    order_date = Column(DateTime(timezone=True), nullable=False)
    completed_date = Column(DateTime(timezone=True), nullable=True)
