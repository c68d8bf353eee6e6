"""
Pricing for carts and orders.

Line totals are kept exact and the order total is rounded once, after
summation. Rounding is half-up. Inputs are assumed valid: the catalog keeps
price >= 0 and discount within [0, 100].
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol, Tuple

from .domain import LineItemSnapshot

HUNDRED = Decimal(100)


class PricedProduct(Protocol):
    id: int
    name: str
    price: float
    discount: float


@dataclass(frozen=True)
class CartQuote:
    items: Tuple[LineItemSnapshot, ...]
    subtotal: Decimal
    total: int
    total_items: int


def to_decimal(value) -> Decimal:
    # str() keeps the value as written instead of its binary float expansion
    return value if isinstance(value, Decimal) else Decimal(str(value))


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def discounted_price(product: PricedProduct) -> Decimal:
    price = to_decimal(product.price)
    return price - price * to_decimal(product.discount) / HUNDRED


def line_total(product: PricedProduct, quantity: int) -> Decimal:
    return discounted_price(product) * quantity


def quote(lines: Iterable[Tuple[PricedProduct, int]]) -> CartQuote:
    items = []
    subtotal = Decimal(0)
    total_items = 0
    for product, quantity in lines:
        items.append(
            LineItemSnapshot(
                product_id=product.id,
                name=product.name,
                unit_price=round_half_up(discounted_price(product)),
                quantity=quantity,
            )
        )
        subtotal += line_total(product, quantity)
        total_items += quantity
    return CartQuote(
        items=tuple(items),
        subtotal=subtotal,
        total=round_half_up(subtotal),
        total_items=total_items,
    )


def to_minor_units(amount: int) -> int:
    return amount * 100
