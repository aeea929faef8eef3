"""
Loyalty use case

Loyalty standing, reward catalogue, redemptions, and turning a catalogue
reward into the single applied checkout reward.
"""

import logging
from typing import List

from goagri_client.application.session_state import SessionState
from goagri_client.domain.entities.loyalty_entity import (
    AppliedReward,
    LoyaltyState,
    Redemption,
    Reward,
)
from goagri_client.domain.repositories.commerce_gateway import CommerceGateway
from goagri_client.domain.value_objects.money import ZERO
from goagri_client.infrastructure.utilities.constants import RewardTypes
from goagri_client.infrastructure.utilities.exceptions import (
    GoAgriClientError,
    InvalidRewardError,
    NotAuthenticatedError,
)


class LoyaltyUseCase:
    """Use case for loyalty status, rewards and redemptions"""

    def __init__(self, gateway: CommerceGateway):
        self._gateway = gateway
        self._logger = logging.getLogger(self.__class__.__name__)

    async def refresh(self, state: SessionState) -> LoyaltyState:
        """Fetch loyalty status; on failure the previous state is kept"""
        if not state.identity.is_authenticated:
            return state.loyalty

        generation = state.generation
        try:
            loyalty = await self._gateway.get_loyalty_status()
        except GoAgriClientError as e:
            self._logger.warning("Loyalty refresh failed for %s: %s", state.identity, e)
            self._sync_stack(state)
            return state.loyalty

        if not state.is_current(generation):
            self._logger.warning("Discarding stale loyalty status for %s", state.identity)
            self._sync_stack(state)
            return state.loyalty

        state.loyalty = loyalty
        state.reward_stack.set_loyalty_percentage(loyalty.discount_percentage)
        self._logger.info(
            "⭐ Loyalty for %s: %s points, %s%% (%s)",
            state.identity,
            loyalty.points,
            loyalty.discount_percentage,
            loyalty.tier_name or "no tier",
        )
        return loyalty

    @staticmethod
    def _sync_stack(state: SessionState) -> None:
        """The stack charges whatever tier the session currently shows"""
        state.reward_stack.set_loyalty_percentage(state.loyalty.discount_percentage)

    async def issue_card(self, state: SessionState) -> LoyaltyState:
        self._require_login(state)
        await self._gateway.issue_loyalty_card()
        self._logger.info("⭐ Loyalty card issued for %s", state.identity)
        return await self.refresh(state)

    async def available_rewards(self, state: SessionState) -> List[Reward]:
        if not state.identity.is_authenticated:
            return []
        try:
            return list(await self._gateway.get_available_rewards())
        except GoAgriClientError as e:
            self._logger.warning("Could not load rewards: %s", e)
            return []

    async def redeem(self, state: SessionState, name: str) -> Redemption:
        """Spend points on a reward; gateway errors surface to the caller"""
        self._require_login(state)
        if not name or not name.strip():
            raise InvalidRewardError("reward name is required")
        redemption = await self._gateway.redeem_reward(name.strip())
        self._logger.info("🎁 Redeemed %s for %s", name, state.identity)
        await self.refresh(state)
        return redemption

    async def redemption_history(self, state: SessionState) -> List[Redemption]:
        if not state.identity.is_authenticated:
            return []
        try:
            return list(await self._gateway.get_redemption_history())
        except GoAgriClientError as e:
            self._logger.warning("Could not load redemption history: %s", e)
            return []

    def apply_reward(self, state: SessionState, reward: Reward) -> AppliedReward:
        """Apply a catalogue reward at checkout, replacing any previous one"""
        applied = to_applied_reward(reward)
        previous = state.reward_stack.apply(applied)
        if previous is not None:
            self._logger.info("Reward %s replaced by %s", previous.name, applied.name)
        return applied

    def apply_manual_reward(
        self,
        state: SessionState,
        name: str,
        discount_amount,
        free_shipping: bool = False,
    ) -> AppliedReward:
        try:
            applied = AppliedReward(
                name=name, discount_amount=discount_amount, free_shipping=free_shipping
            )
        except (TypeError, ValueError) as e:
            raise InvalidRewardError(str(e)) from e
        state.reward_stack.apply(applied)
        return applied

    def remove_reward(self, state: SessionState) -> None:
        state.reward_stack.remove_reward()

    @staticmethod
    def _require_login(state: SessionState) -> None:
        if not state.identity.is_authenticated:
            raise NotAuthenticatedError()


def to_applied_reward(reward: Reward) -> AppliedReward:
    """discount -> flat amount, shipping -> free delivery; anything else is rejected"""
    try:
        if reward.reward_type == RewardTypes.DISCOUNT:
            return AppliedReward(name=reward.name, discount_amount=reward.value)
        if reward.reward_type == RewardTypes.SHIPPING:
            return AppliedReward(name=reward.name, discount_amount=ZERO, free_shipping=True)
    except ValueError as e:
        raise InvalidRewardError(str(e)) from e
    raise InvalidRewardError(f"{reward.reward_type!r} rewards cannot be applied at checkout")
