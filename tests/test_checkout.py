import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from services.auth_service.service import AuthService
from services.cart_service.repository import CartRepository
from services.order_service.checkout import CheckoutService
from services.order_service.domain import CashOnDelivery, PrepaidCard, VerifiedGatewayPayment
from services.order_service.models import IndexBucket, Order, OrderIndexEntry
from services.order_service.repository import OrderRepository
from services.product_service.repository import ProductRepository
from shared.errors import DuplicatePayment, EmptyCart, Internal, InvalidInput, NotFound, OutOfStock, StaleCartItem

from .conftest import make_address


async def order_count(db) -> int:
    return (await db.execute(select(func.count(Order.id)))).scalar_one()


async def test_cod_checkout(db, user, make_product, add_to_cart):
    belt = await make_product(price=500)
    purse = await make_product(name="Silk Purse", price=300, discount=50, category="Purses")
    await add_to_cart(user.id, belt.id, 2)
    await add_to_cart(user.id, purse.id, 1)

    order = await CheckoutService.checkout(db, user.id, make_address(), CashOnDelivery())

    assert order.total_amount == 1150
    assert order.order_status == "processing"
    assert order.payment_status == "pending"
    assert order.payment_method == "cod"
    assert order.shipping_address == make_address()
    assert [(i.item_name, i.item_price, i.quantity) for i in order.items] == [
        ("Leather Belt", 500, 2),
        ("Silk Purse", 150, 1),
    ]
    assert await CartRepository.get_lines(db, user.id) == []

    profile = await AuthService.get_profile(db, user.id)
    assert [e.order_id for e in profile.pending_orders] == [order.id]
    assert profile.completed_orders == []


async def test_card_checkout_is_paid(db, user, make_product, add_to_cart):
    belt = await make_product()
    await add_to_cart(user.id, belt.id)

    order = await CheckoutService.checkout(db, user.id, make_address(), PrepaidCard())
    assert (order.payment_method, order.payment_status) == ("card", "completed")


async def test_gateway_checkout_records_correlation_fields(db, user, make_product, add_to_cart):
    belt = await make_product()
    await add_to_cart(user.id, belt.id)

    confirmation = VerifiedGatewayPayment("order_x", "pay_x", "sig_x")
    order = await CheckoutService.checkout(db, user.id, make_address(), confirmation)

    assert (order.payment_method, order.payment_status) == ("online", "completed")
    assert (order.gateway_order_id, order.gateway_payment_id, order.gateway_signature) == (
        "order_x",
        "pay_x",
        "sig_x",
    )


async def test_order_keeps_price_snapshot(database, db, user, make_product, add_to_cart):
    belt = await make_product(price=500)
    await add_to_cart(user.id, belt.id, 2)
    order = await CheckoutService.checkout(db, user.id, make_address(), CashOnDelivery())

    belt.price = 9000
    belt.name = "Renamed Belt"
    await ProductRepository.update_product(db, belt)

    async with database.sessionmaker() as fresh:
        stored = await OrderRepository.get_order(fresh, order.id)
    assert stored.total_amount == 1000
    assert stored.items[0].item_name == "Leather Belt"
    assert stored.items[0].item_price == 500


async def test_empty_cart(db, user):
    with pytest.raises(EmptyCart):
        await CheckoutService.checkout(db, user.id, make_address(), CashOnDelivery())


async def test_unknown_user(db):
    with pytest.raises(NotFound):
        await CheckoutService.checkout(db, 4242, make_address(), CashOnDelivery())


async def test_incomplete_address_leaves_cart_alone(db, user, make_product, add_to_cart):
    user_id = user.id
    belt = await make_product()
    await add_to_cart(user_id, belt.id)

    with pytest.raises(InvalidInput, match="pincode"):
        await CheckoutService.checkout(db, user_id, make_address(pincode=""), CashOnDelivery())

    assert await order_count(db) == 0
    assert len(await CartRepository.get_lines(db, user_id)) == 1


async def test_one_out_of_stock_line_rejects_whole_cart(db, user, make_product, add_to_cart):
    user_id = user.id
    belt = await make_product()
    bag = await make_product(name="Travel Bag", category="Bags", in_stock=False)
    await add_to_cart(user_id, belt.id)
    await add_to_cart(user_id, bag.id)

    with pytest.raises(OutOfStock, match="Travel Bag"):
        await CheckoutService.checkout(db, user_id, make_address(), CashOnDelivery())

    assert await order_count(db) == 0
    assert (await db.execute(select(func.count(OrderIndexEntry.id)))).scalar_one() == 0
    assert len(await CartRepository.get_lines(db, user_id)) == 2


async def test_deleted_product_in_cart_rejects_checkout(db, user, make_product, add_to_cart):
    user_id = user.id
    belt = await make_product()
    purse = await make_product(name="Silk Purse", category="Purses")
    await add_to_cart(user_id, belt.id)
    await add_to_cart(user_id, purse.id)
    await ProductRepository.delete_product(db, purse)

    with pytest.raises(StaleCartItem):
        await CheckoutService.checkout(db, user_id, make_address(), CashOnDelivery())

    assert await order_count(db) == 0
    assert len(await CartRepository.get_lines(db, user_id)) == 2


async def test_price_cart_matches_checkout_total(db, user, make_product, add_to_cart):
    first = await make_product(price=999, discount=15)
    second = await make_product(name="Canvas Belt", price=999, discount=15)
    await add_to_cart(user.id, first.id, 2)
    await add_to_cart(user.id, second.id, 2)

    quote = await CheckoutService.price_cart(db, user.id)
    order = await CheckoutService.checkout(db, user.id, make_address(), CashOnDelivery())

    assert quote.total == order.total_amount == 3397


async def test_index_entry_starts_pending(db, user, make_product, add_to_cart):
    belt = await make_product()
    await add_to_cart(user.id, belt.id)
    order = await CheckoutService.checkout(db, user.id, make_address(), CashOnDelivery())

    entry = (
        await db.execute(select(OrderIndexEntry).where(OrderIndexEntry.order_id == order.id))
    ).scalar_one()
    assert entry.bucket == IndexBucket.PENDING
    assert entry.user_id == user.id
    assert entry.completed_date is None


async def test_replayed_gateway_payment_is_rejected(db, user, make_product, add_to_cart):
    user_id = user.id
    belt = await make_product()
    await add_to_cart(user_id, belt.id)
    confirmation = VerifiedGatewayPayment("order_r", "pay_r", "sig_r")
    await CheckoutService.checkout(db, user_id, make_address(), confirmation)

    await add_to_cart(user_id, belt.id)
    with pytest.raises(DuplicatePayment):
        await CheckoutService.checkout(db, user_id, make_address(), confirmation)

    assert await order_count(db) == 1
    assert len(await CartRepository.get_lines(db, user_id)) == 1


async def test_unique_gateway_columns_back_up_the_lookup(monkeypatch, db, user, make_product, add_to_cart):
    user_id = user.id
    belt = await make_product()
    await add_to_cart(user_id, belt.id)
    confirmation = VerifiedGatewayPayment("order_u", "pay_u", "sig_u")
    await CheckoutService.checkout(db, user_id, make_address(), confirmation)

    async def nothing_found(*args, **kwargs):
        return None

    monkeypatch.setattr(OrderRepository, "get_by_gateway_ids", nothing_found)
    await add_to_cart(user_id, belt.id)
    with pytest.raises(DuplicatePayment):
        await CheckoutService.checkout(db, user_id, make_address(), confirmation)

    assert await order_count(db) == 1
    assert len(await CartRepository.get_lines(db, user_id)) == 1


async def test_database_failure_rolls_back_whole_checkout(monkeypatch, database, db, user, make_product, add_to_cart):
    user_id = user.id
    belt = await make_product()
    await add_to_cart(user_id, belt.id)

    async def broken_clear(*args, **kwargs):
        raise OperationalError("DELETE FROM cart_items", {}, Exception("disk I/O error"))

    monkeypatch.setattr(CartRepository, "clear_cart", broken_clear)
    with pytest.raises(Internal, match="Failed to place order"):
        await CheckoutService.checkout(db, user_id, make_address(), CashOnDelivery())

    async with database.sessionmaker() as fresh:
        assert await order_count(fresh) == 0
        assert (await fresh.execute(select(func.count(OrderIndexEntry.id)))).scalar_one() == 0
        assert len(await CartRepository.get_lines(fresh, user_id)) == 1
