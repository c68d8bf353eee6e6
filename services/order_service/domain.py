"""
Value types for the order pipeline.

Everything here is immutable: the catalog ``Product`` is the mutable entity,
``LineItemSnapshot`` is the copy of it an order keeps forever.
"""
from dataclasses import dataclass, fields
from enum import Enum
from typing import Union

from shared.errors import InvalidInput, InvalidTransition


class OrderStatus(str, Enum):
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    COD = "cod"
    ONLINE = "online"
    CARD = "card"


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

ALLOWED_TRANSITIONS = {
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise InvalidInput(f"Invalid status. Must be one of: {allowed}") from None


def ensure_transition(current: str, target: OrderStatus) -> None:
    current = OrderStatus(current)
    if current == OrderStatus.DELIVERED:
        raise InvalidTransition("Cannot change status of delivered order")
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(f"Cannot move order from {current.value} to {target.value}")


@dataclass(frozen=True)
class ShippingAddress:
    street: str
    city: str
    state: str
    pincode: str
    phone: str

    def missing_fields(self):
        return [f.name for f in fields(self) if not str(getattr(self, f.name) or "").strip()]

    def validate(self) -> "ShippingAddress":
        missing = self.missing_fields()
        if missing:
            raise InvalidInput(
                "Complete shipping address is required (street, city, state, pincode, phone); "
                f"missing: {', '.join(missing)}"
            )
        return self


@dataclass(frozen=True)
class LineItemSnapshot:
    product_id: int
    name: str
    unit_price: int
    quantity: int


# --- Payment confirmations ---
# Checkout takes exactly one of these; it decides the order's payment fields.

@dataclass(frozen=True)
class CashOnDelivery:
    method = PaymentMethod.COD
    status = PaymentStatus.PENDING


@dataclass(frozen=True)
class PrepaidCard:
    method = PaymentMethod.CARD
    status = PaymentStatus.COMPLETED


@dataclass(frozen=True)
class VerifiedGatewayPayment:
    """Only produced by the signature check in payment_service.signature."""

    gateway_order_id: str
    gateway_payment_id: str
    gateway_signature: str

    method = PaymentMethod.ONLINE
    status = PaymentStatus.COMPLETED


PaymentConfirmation = Union[CashOnDelivery, PrepaidCard, VerifiedGatewayPayment]
