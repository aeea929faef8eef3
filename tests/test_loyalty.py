"""
Loyalty use case tests
"""

from decimal import Decimal

import pytest

from goagri_client.domain.entities.loyalty_entity import LoyaltyState, Redemption, Reward
from goagri_client.infrastructure.utilities.exceptions import (
    GatewayError,
    InvalidRewardError,
    NotAuthenticatedError,
)

GOLD = LoyaltyState(
    points=120, discount_percentage=Decimal("10"), tier_name="gold", card_issued=True
)


class TestLoyaltyStatus:
    """Test loyalty refresh and card issuing"""

    @pytest.mark.asyncio
    async def test_refresh_sets_state_and_percentage(self, loyalty_use_case, authed_state, gateway):
        gateway.get_loyalty_status.return_value = GOLD

        loyalty = await loyalty_use_case.refresh(authed_state)

        assert loyalty == GOLD
        assert authed_state.loyalty == GOLD
        assert authed_state.reward_stack.loyalty_percentage == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_refresh_failure_keeps_previous(self, loyalty_use_case, authed_state, gateway):
        authed_state.loyalty = GOLD
        gateway.get_loyalty_status.side_effect = GatewayError("down", 500)

        assert await loyalty_use_case.refresh(authed_state) == GOLD

    @pytest.mark.asyncio
    async def test_refresh_failure_restores_stack_percentage(self, loyalty_use_case, authed_state, gateway):
        authed_state.loyalty = GOLD
        authed_state.reward_stack.reset()
        gateway.get_loyalty_status.side_effect = GatewayError("down", 500)

        await loyalty_use_case.refresh(authed_state)

        assert authed_state.reward_stack.loyalty_percentage == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_guest_refresh_is_noop(self, loyalty_use_case, guest_state, gateway):
        await loyalty_use_case.refresh(guest_state)
        gateway.get_loyalty_status.assert_not_called()

    @pytest.mark.asyncio
    async def test_issue_card_then_refresh(self, loyalty_use_case, authed_state, gateway):
        gateway.get_loyalty_status.return_value = GOLD

        await loyalty_use_case.issue_card(authed_state)

        gateway.issue_loyalty_card.assert_awaited_once()
        assert authed_state.loyalty.card_issued

    @pytest.mark.asyncio
    async def test_issue_card_requires_login(self, loyalty_use_case, guest_state):
        with pytest.raises(NotAuthenticatedError):
            await loyalty_use_case.issue_card(guest_state)


class TestRewards:
    """Test reward catalogue, redemption and application"""

    @pytest.mark.asyncio
    async def test_rewards_degrade_to_empty(self, loyalty_use_case, authed_state, gateway):
        gateway.get_available_rewards.side_effect = GatewayError("down", 500)
        assert await loyalty_use_case.available_rewards(authed_state) == []

    @pytest.mark.asyncio
    async def test_redeem_surfaces_errors(self, loyalty_use_case, authed_state, gateway):
        gateway.redeem_reward.side_effect = GatewayError("Not enough points", 400)
        with pytest.raises(GatewayError, match="Not enough points"):
            await loyalty_use_case.redeem(authed_state, "₱50 Off")

    @pytest.mark.asyncio
    async def test_redeem_refreshes_status(self, loyalty_use_case, authed_state, gateway):
        gateway.redeem_reward.return_value = Redemption(reward_name="₱50 Off", points_spent=100)
        gateway.get_loyalty_status.return_value = GOLD

        redemption = await loyalty_use_case.redeem(authed_state, "₱50 Off")

        assert redemption.points_spent == 100
        gateway.redeem_reward.assert_awaited_once_with("₱50 Off")
        gateway.get_loyalty_status.assert_awaited()

    @pytest.mark.asyncio
    async def test_history_degrades_to_empty(self, loyalty_use_case, authed_state, gateway):
        gateway.get_redemption_history.side_effect = GatewayError("down", 500)
        assert await loyalty_use_case.redemption_history(authed_state) == []

    def test_apply_discount_reward(self, loyalty_use_case, authed_state):
        reward = Reward(name="₱50 Off", cost=100, reward_type="discount", value=Decimal("50"))
        applied = loyalty_use_case.apply_reward(authed_state, reward)
        assert applied.discount_amount == Decimal("50.00")
        assert authed_state.reward_stack.applied_reward == applied

    def test_apply_shipping_reward(self, loyalty_use_case, authed_state):
        reward = Reward(name="Free Delivery", cost=150, reward_type="shipping", value=Decimal("0"))
        applied = loyalty_use_case.apply_reward(authed_state, reward)
        assert applied.free_shipping
        assert applied.discount_amount == Decimal("0.00")

    def test_apply_replaces_previous_reward(self, loyalty_use_case, authed_state):
        first = Reward(name="₱50 Off", cost=100, reward_type="discount", value=Decimal("50"))
        second = Reward(name="₱100 Off", cost=180, reward_type="discount", value=Decimal("100"))
        loyalty_use_case.apply_reward(authed_state, first)
        loyalty_use_case.apply_reward(authed_state, second)
        assert authed_state.reward_stack.applied_reward.name == "₱100 Off"

    def test_bonus_reward_cannot_be_applied(self, loyalty_use_case, authed_state):
        reward = Reward(name="Double Points", cost=200, reward_type="bonus", value=Decimal("2"))
        with pytest.raises(InvalidRewardError):
            loyalty_use_case.apply_reward(authed_state, reward)
        assert authed_state.reward_stack.applied_reward is None

    def test_malformed_manual_reward(self, loyalty_use_case, authed_state):
        with pytest.raises(InvalidRewardError):
            loyalty_use_case.apply_manual_reward(authed_state, "Promo", Decimal("-10"))
        with pytest.raises(InvalidRewardError):
            loyalty_use_case.apply_manual_reward(authed_state, "", Decimal("10"))
