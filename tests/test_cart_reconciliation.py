"""
Cart reconciliation use case tests
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from goagri_client.application.use_cases.cart_reconciliation_use_case import (
    CartReconciliationUseCase,
)
from goagri_client.infrastructure.utilities.constants import StorageKeys
from goagri_client.infrastructure.utilities.exceptions import (
    GatewayError,
    OutOfStockError,
    StockExceededError,
    StorageError,
)

from conftest import make_line, make_product


class TestAdd:
    """Test adding products with stock checks"""

    @pytest.mark.asyncio
    async def test_add_appends_new_line(self, cart_use_case, guest_state):
        line = await cart_use_case.add(guest_state, make_product())
        assert line.quantity == 1
        assert guest_state.cart.lines == [line]

    @pytest.mark.asyncio
    async def test_add_increments_existing_line(self, cart_use_case, guest_state):
        product = make_product(stock=5)
        await cart_use_case.add(guest_state, product)
        await cart_use_case.add(guest_state, product)
        assert len(guest_state.cart.lines) == 1
        assert guest_state.cart.quantity_of("p1") == 2

    @pytest.mark.asyncio
    async def test_add_out_of_stock(self, cart_use_case, guest_state, gateway):
        with pytest.raises(OutOfStockError):
            await cart_use_case.add(guest_state, make_product(stock=0))
        assert guest_state.cart.is_empty
        gateway.save_cart.assert_not_called()

    @pytest.mark.asyncio
    async def test_add_stock_exceeded(self, cart_use_case, guest_state):
        product = make_product(stock=1)
        await cart_use_case.add(guest_state, product)
        with pytest.raises(StockExceededError) as exc_info:
            await cart_use_case.add(guest_state, product)
        assert exc_info.value.stock == 1
        assert guest_state.cart.quantity_of("p1") == 1


class TestQuantity:
    """Test quantity changes"""

    @pytest.mark.asyncio
    async def test_set_quantity_replaces(self, cart_use_case, guest_state):
        await cart_use_case.add(guest_state, make_product())
        assert await cart_use_case.set_quantity(guest_state, "p1", 7)
        assert guest_state.cart.quantity_of("p1") == 7

    @pytest.mark.asyncio
    async def test_set_quantity_ignores_stock(self, cart_use_case, guest_state):
        await cart_use_case.add(guest_state, make_product(stock=2))
        await cart_use_case.set_quantity(guest_state, "p1", 50)
        assert guest_state.cart.quantity_of("p1") == 50

    @pytest.mark.asyncio
    async def test_set_quantity_clamps_to_max_stock(self, cart_use_case, guest_state):
        await cart_use_case.add(guest_state, make_product(stock=2))
        await cart_use_case.set_quantity(guest_state, "p1", 50, max_stock=2)
        assert guest_state.cart.quantity_of("p1") == 2

    @pytest.mark.asyncio
    async def test_zero_or_negative_removes(self, cart_use_case, guest_state):
        await cart_use_case.add(guest_state, make_product())
        await cart_use_case.set_quantity(guest_state, "p1", -3)
        assert guest_state.cart.is_empty

    @pytest.mark.asyncio
    async def test_unknown_product_is_noop(self, cart_use_case, guest_state, store):
        assert not await cart_use_case.set_quantity(guest_state, "ghost", 2)
        assert await store.get(StorageKeys.GUEST_CART) is None

    @pytest.mark.asyncio
    async def test_increment_and_decrement(self, cart_use_case, guest_state):
        await cart_use_case.add(guest_state, make_product())
        await cart_use_case.increment(guest_state, "p1")
        assert guest_state.cart.quantity_of("p1") == 2
        await cart_use_case.decrement(guest_state, "p1")
        await cart_use_case.decrement(guest_state, "p1")
        assert guest_state.cart.find("p1") is None

    @pytest.mark.asyncio
    async def test_increment_with_stock(self, cart_use_case, guest_state):
        await cart_use_case.add(guest_state, make_product(stock=1))
        with pytest.raises(StockExceededError):
            await cart_use_case.increment(guest_state, "p1", stock=1)

    @pytest.mark.asyncio
    async def test_line_invariant_after_mixed_sequence(self, cart_use_case, guest_state):
        a = make_product("a", stock=10)
        b = make_product("b", stock=10)
        await cart_use_case.add(guest_state, a)
        await cart_use_case.add(guest_state, b)
        await cart_use_case.add(guest_state, a)
        await cart_use_case.set_quantity(guest_state, "b", 0)
        await cart_use_case.add(guest_state, b)
        await cart_use_case.set_quantity(guest_state, "a", 4)
        await cart_use_case.decrement(guest_state, "b")

        ids = [line.product_id for line in guest_state.cart.lines]
        assert len(ids) == len(set(ids))
        assert all(line.quantity >= 1 for line in guest_state.cart.lines)
        assert ids == ["a"]


class TestPersist:
    """Test persistence after every mutation"""

    @pytest.mark.asyncio
    async def test_guest_cart_goes_to_store(self, cart_use_case, guest_state, store, gateway):
        await cart_use_case.add(guest_state, make_product())
        stored = await store.get(StorageKeys.GUEST_CART)
        assert stored == {"items": [make_line().to_dict()]}
        gateway.save_cart.assert_not_called()

    @pytest.mark.asyncio
    async def test_authed_cart_goes_to_gateway(self, cart_use_case, authed_state, store, gateway):
        await cart_use_case.add(authed_state, make_product())
        gateway.save_cart.assert_awaited_once()
        user_id, lines = gateway.save_cart.await_args.args
        assert user_id == "user-1"
        assert [line.product_id for line in lines] == ["p1"]
        assert await store.get(StorageKeys.GUEST_CART) is None

    @pytest.mark.asyncio
    async def test_gateway_failure_is_swallowed(self, cart_use_case, authed_state, gateway):
        gateway.save_cart.side_effect = GatewayError("backend down", 503)
        line = await cart_use_case.add(authed_state, make_product())
        assert authed_state.cart.lines == [line]

    @pytest.mark.asyncio
    async def test_store_failure_is_swallowed(self, gateway, guest_state):
        broken_store = MagicMock()
        broken_store.set = AsyncMock(side_effect=StorageError("disk full", "set"))
        use_case = CartReconciliationUseCase(gateway=gateway, store=broken_store)

        await use_case.add(guest_state, make_product())
        assert guest_state.cart.quantity_of("p1") == 1

    @pytest.mark.asyncio
    async def test_clear_persists_empty_cart(self, cart_use_case, guest_state, store):
        await cart_use_case.add(guest_state, make_product())
        await cart_use_case.clear(guest_state)
        assert await store.get(StorageKeys.GUEST_CART) == {"items": []}


class TestGuestCartLoading:
    """Test reading the stored guest cart"""

    @pytest.mark.asyncio
    async def test_load_guest_cart(self, cart_use_case, guest_state, store):
        await store.set(
            StorageKeys.GUEST_CART,
            {"items": [make_line(quantity=2).to_dict(), {"name": "broken"}]},
        )
        lines = await cart_use_case.load_guest_cart(guest_state)
        assert len(lines) == 1
        assert guest_state.cart.quantity_of("p1") == 2

    @pytest.mark.asyncio
    async def test_load_missing_guest_cart(self, cart_use_case, guest_state):
        assert await cart_use_case.load_guest_cart(guest_state) == []


class TestProductUpdates:
    """Test live catalogue updates applied to cart lines"""

    @pytest.mark.asyncio
    async def test_update_name_and_price(self, cart_use_case, guest_state):
        await cart_use_case.add(guest_state, make_product())
        changed = await cart_use_case.apply_product_update(
            guest_state, "p1", "Rice seeds (5kg)", 120
        )
        assert changed
        line = guest_state.cart.find("p1")
        assert line.name == "Rice seeds (5kg)"
        assert line.price == Decimal("120.00")
        assert line.quantity == 1

    @pytest.mark.asyncio
    async def test_update_for_product_not_in_cart(self, cart_use_case, guest_state):
        assert not await cart_use_case.apply_product_update(guest_state, "zz", "X", 1)
