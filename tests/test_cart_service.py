import pytest

from services.cart_service.repository import CartRepository
from services.cart_service.service import CartService
from services.product_service.repository import ProductRepository
from shared.errors import InvalidInput, NotFound, OutOfStock


async def test_repeat_add_merges_into_one_line(db, user, make_product):
    belt = await make_product()

    await CartService.add_item(db, user.id, belt.id, 2)
    cart = await CartService.add_item(db, user.id, belt.id, 3)

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 5
    assert cart.summary.total_items == 5
    assert cart.summary.item_count == 1
    assert cart.summary.subtotal == 2500


async def test_summary_uses_discounted_prices(db, user, make_product):
    belt = await make_product(price=500)
    purse = await make_product(name="Silk Purse", price=300, discount=50, category="Purses")

    await CartService.add_item(db, user.id, belt.id, 2)
    cart = await CartService.add_item(db, user.id, purse.id)

    assert [line.product_id for line in cart.items] == [belt.id, purse.id]
    assert cart.summary.subtotal == 1150
    assert cart.summary.total_items == 3


async def test_add_rejects_bad_requests(db, user, make_product):
    sold_out = await make_product(in_stock=False)

    with pytest.raises(InvalidInput):
        await CartService.add_item(db, user.id, sold_out.id, 0)
    with pytest.raises(NotFound, match="Product not found"):
        await CartService.add_item(db, user.id, 9999)
    with pytest.raises(OutOfStock):
        await CartService.add_item(db, user.id, sold_out.id)


async def test_add_for_unknown_user(db, make_product):
    belt = await make_product()
    with pytest.raises(NotFound, match="User not found"):
        await CartService.add_item(db, 4242, belt.id)


async def test_increase_and_decrease(db, user, make_product):
    belt = await make_product()
    await CartService.add_item(db, user.id, belt.id, 2)

    cart = await CartService.update_item(db, user.id, belt.id, "increase")
    assert cart.items[0].quantity == 3
    assert cart.removed is False

    cart = await CartService.update_item(db, user.id, belt.id, "decrease")
    assert cart.items[0].quantity == 2


async def test_set_to_zero_removes_line(db, user, make_product):
    belt = await make_product()
    await CartService.add_item(db, user.id, belt.id, 2)

    cart = await CartService.update_item(db, user.id, belt.id, "set", 0)

    assert cart.removed is True
    assert cart.items == []
    assert await CartRepository.get_item(db, user.id, belt.id) is None


async def test_decrease_below_one_removes_line(db, user, make_product):
    belt = await make_product()
    await CartService.add_item(db, user.id, belt.id, 1)

    cart = await CartService.update_item(db, user.id, belt.id, "decrease")
    assert cart.removed is True
    assert cart.items == []


async def test_update_validation(db, user, make_product):
    belt = await make_product()
    await CartService.add_item(db, user.id, belt.id)

    with pytest.raises(InvalidInput):
        await CartService.update_item(db, user.id, belt.id, "set", None)
    with pytest.raises(InvalidInput):
        await CartService.update_item(db, user.id, belt.id, "set", -1)
    with pytest.raises(InvalidInput):
        await CartService.update_item(db, user.id, belt.id, "double")
    with pytest.raises(NotFound, match="not found in cart"):
        await CartService.update_item(db, user.id, 9999, "increase")


async def test_remove_item(db, user, make_product):
    belt = await make_product()
    await CartService.add_item(db, user.id, belt.id)

    cart = await CartService.remove_item(db, user.id, belt.id)
    assert cart.items == []

    with pytest.raises(NotFound):
        await CartService.remove_item(db, user.id, belt.id)


async def test_read_drops_lines_for_deleted_products(db, user, make_product):
    belt = await make_product()
    purse = await make_product(name="Silk Purse", price=300, category="Purses")
    await CartService.add_item(db, user.id, belt.id)
    await CartService.add_item(db, user.id, purse.id, 2)

    await ProductRepository.delete_product(db, belt)
    cart = await CartService.get_cart(db, user.id)

    assert [line.product_id for line in cart.items] == [purse.id]
    assert cart.summary.subtotal == 600
    # the stored cart was compacted, not just filtered
    assert await CartRepository.get_item(db, user.id, belt.id) is None
    assert len(await CartRepository.get_lines(db, user.id)) == 1
