"""
Guest cart merge tests
"""

from unittest.mock import AsyncMock, patch

import pytest

from goagri_client.application.dtos.session_dtos import GuestCartMerged
from goagri_client.application.use_cases.guest_cart_merge_use_case import (
    GuestCartMergeUseCase,
    merge_cart_lines,
)
from goagri_client.domain.value_objects.session_identity import SessionIdentity
from goagri_client.infrastructure.utilities.constants import StorageKeys
from goagri_client.infrastructure.utilities.exceptions import (
    GatewayError,
    StorageError,
)

from conftest import make_line


@pytest.fixture
def merge_use_case(gateway, store, cart_use_case):
    return GuestCartMergeUseCase(gateway=gateway, store=store, cart_use_case=cart_use_case)


async def store_guest_cart(store, *lines):
    await store.set(StorageKeys.GUEST_CART, {"items": [line.to_dict() for line in lines]})


class TestMergeCartLines:
    """Test the pure merge of server and guest lines"""

    def test_quantities_are_summed(self):
        server = [make_line("a", quantity=2), make_line("b", quantity=1)]
        guest = [make_line("b", quantity=3), make_line("c", quantity=4)]
        merged = {line.product_id: line.quantity for line in merge_cart_lines(server, guest)}
        assert merged == {"a": 2, "b": 4, "c": 4}

    def test_server_attributes_win(self):
        server = [make_line("a", name="Server name", price="90")]
        guest = [make_line("a", name="Guest name", price="100")]
        (line,) = merge_cart_lines(server, guest)
        assert line.name == "Server name"
        assert str(line.price) == "90.00"
        assert line.quantity == 2

    def test_quantities_clamped_to_99(self):
        merged = merge_cart_lines([make_line(quantity=60)], [make_line(quantity=70)])
        assert merged[0].quantity == 99

    def test_server_order_first(self):
        merged = merge_cart_lines([make_line("s")], [make_line("g"), make_line("s")])
        assert [line.product_id for line in merged] == ["s", "g"]


class TestGuestCartMergeUseCase:
    """Test the merge routine run after login"""

    @pytest.mark.asyncio
    async def test_merge_writes_back_and_clears_guest(self, merge_use_case, authed_state, store, gateway):
        await store_guest_cart(store, make_line("a", quantity=2), make_line("b", quantity=1))
        gateway.fetch_cart.return_value = [make_line("a", quantity=1)]

        assert await merge_use_case.execute(authed_state)

        user_id, lines = gateway.save_cart.await_args.args
        assert user_id == "user-1"
        assert {line.product_id: line.quantity for line in lines} == {"a": 3, "b": 1}
        assert await store.get(StorageKeys.GUEST_CART) is None
        assert authed_state.drain_events() == [GuestCartMerged(line_count=2)]

    @pytest.mark.asyncio
    async def test_empty_guest_cart_is_noop(self, merge_use_case, authed_state, gateway):
        assert not await merge_use_case.execute(authed_state)
        gateway.fetch_cart.assert_not_called()
        gateway.save_cart.assert_not_called()
        assert authed_state.drain_events() == []

    @pytest.mark.asyncio
    async def test_fetch_failure_aborts_silently(self, merge_use_case, authed_state, store, gateway):
        await store_guest_cart(store, make_line("a"))
        gateway.fetch_cart.side_effect = GatewayError("boom", 500)

        assert not await merge_use_case.execute(authed_state)
        gateway.save_cart.assert_not_called()
        assert await store.get(StorageKeys.GUEST_CART) is not None

    @pytest.mark.asyncio
    async def test_save_failure_keeps_guest_cart(self, merge_use_case, authed_state, store, gateway):
        await store_guest_cart(store, make_line("a"))
        gateway.save_cart.side_effect = GatewayError("boom", 500)

        assert not await merge_use_case.execute(authed_state)
        assert await store.get(StorageKeys.GUEST_CART) is not None
        assert authed_state.drain_events() == []

    @pytest.mark.asyncio
    async def test_saved_merge_survives_guest_clear_failure(self, merge_use_case, authed_state, store, gateway):
        await store_guest_cart(store, make_line("a", quantity=2))

        with patch.object(store, "remove", AsyncMock(side_effect=StorageError("locked", "remove"))):
            assert await merge_use_case.execute(authed_state)

        gateway.save_cart.assert_awaited_once()
        assert authed_state.drain_events() == [GuestCartMerged(line_count=1)]

    @pytest.mark.asyncio
    async def test_identity_change_abandons_merge(self, merge_use_case, authed_state, store, gateway):
        await store_guest_cart(store, make_line("a"))

        async def logout_during_fetch(user_id):
            authed_state.switch_identity(SessionIdentity.guest())
            return []

        gateway.fetch_cart.side_effect = logout_during_fetch

        assert not await merge_use_case.execute(authed_state)
        gateway.save_cart.assert_not_called()
        assert await store.get(StorageKeys.GUEST_CART) is not None

    @pytest.mark.asyncio
    async def test_guest_session_skips(self, merge_use_case, guest_state, gateway):
        assert not await merge_use_case.execute(guest_state)
        gateway.fetch_cart.assert_not_called()
