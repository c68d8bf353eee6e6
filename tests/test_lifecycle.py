import pytest
from sqlalchemy.exc import OperationalError

from services.auth_service.models import User
from services.auth_service.repository import UserRepository
from services.auth_service.service import AuthService
from services.order_service.checkout import CheckoutService
from services.order_service.domain import CashOnDelivery, PrepaidCard
from services.order_service.lifecycle import OrderLifecycleService
from services.order_service.repository import OrderIndexRepository, OrderRepository
from shared.errors import Forbidden, Internal, InvalidInput, InvalidTransition, NotFound

from .conftest import make_address


@pytest.fixture
def place_order(db, user, make_product, add_to_cart):
    async def _place(confirmation=None):
        product = await make_product()
        await add_to_cart(user.id, product.id)
        return await CheckoutService.checkout(db, user.id, make_address(), confirmation or CashOnDelivery())

    return _place


async def test_shipping_then_delivering_cod_collects_payment(db, user, place_order):
    order = await place_order()

    order, previous = await OrderLifecycleService.set_status(db, order.id, "shipped")
    assert previous == "processing"
    assert order.payment_status == "pending"

    order, previous = await OrderLifecycleService.set_status(db, order.id, "delivered")
    assert previous == "shipped"
    assert order.order_status == "delivered"
    assert order.payment_status == "completed"

    profile = await AuthService.get_profile(db, user.id)
    assert profile.pending_orders == []
    assert [e.order_id for e in profile.completed_orders] == [order.id]
    assert profile.completed_orders[0].completed_date is not None


async def test_delivered_order_rejects_every_change(db, place_order):
    order = await place_order()
    await OrderLifecycleService.set_status(db, order.id, "shipped")
    await OrderLifecycleService.set_status(db, order.id, "delivered")

    for status in ("processing", "shipped", "delivered", "cancelled"):
        with pytest.raises(InvalidTransition, match="Cannot change status of delivered order"):
            await OrderLifecycleService.set_status(db, order.id, status)


async def test_admin_cannot_skip_shipping(db, place_order):
    order = await place_order()
    with pytest.raises(InvalidTransition):
        await OrderLifecycleService.set_status(db, order.id, "delivered")


async def test_unknown_status_and_order(db, place_order):
    order = await place_order()
    with pytest.raises(InvalidInput):
        await OrderLifecycleService.set_status(db, order.id, "returned")
    with pytest.raises(NotFound):
        await OrderLifecycleService.set_status(db, 9999, "shipped")


async def test_owner_cancels_processing_order(db, user, place_order):
    order = await place_order(PrepaidCard())

    cancelled = await OrderLifecycleService.cancel(db, order.id, user.id)

    assert cancelled.order_status == "cancelled"
    assert cancelled.payment_status == "completed"
    profile = await AuthService.get_profile(db, user.id)
    assert profile.pending_orders == []
    assert [e.order_id for e in profile.completed_orders] == [order.id]


async def test_only_owner_may_cancel(db, place_order):
    order = await place_order()
    stranger = await UserRepository.create(
        db, User(name="Ravi", email="ravi@example.com", hashed_password="not-a-real-hash")
    )

    with pytest.raises(Forbidden):
        await OrderLifecycleService.cancel(db, order.id, stranger.id)


async def test_shipped_order_cannot_be_cancelled(db, user, place_order):
    order = await place_order()
    await OrderLifecycleService.set_status(db, order.id, "shipped")

    with pytest.raises(InvalidTransition, match="Only processing orders"):
        await OrderLifecycleService.cancel(db, order.id, user.id)


async def test_cancelled_order_is_final(db, user, place_order):
    order = await place_order()
    await OrderLifecycleService.cancel(db, order.id, user.id)

    with pytest.raises(InvalidTransition):
        await OrderLifecycleService.cancel(db, order.id, user.id)
    with pytest.raises(InvalidTransition):
        await OrderLifecycleService.set_status(db, order.id, "shipped")


async def test_failed_status_write_leaves_order_untouched(monkeypatch, database, db, user, place_order):
    user_id = user.id
    order = await place_order()
    order_id = order.id

    async def broken_move(*args, **kwargs):
        raise OperationalError("UPDATE order_index", {}, Exception("database is locked"))

    monkeypatch.setattr(OrderIndexRepository, "move_to_completed", broken_move)
    with pytest.raises(Internal, match="Failed to update order status"):
        await OrderLifecycleService.cancel(db, order_id, user_id)

    async with database.sessionmaker() as fresh:
        stored = await OrderRepository.get_order(fresh, order_id)
        assert stored.order_status == "processing"
        profile = await AuthService.get_profile(fresh, user_id)
    assert [e.order_id for e in profile.pending_orders] == [order_id]
