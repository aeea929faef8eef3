"""
Reward & discount stack

The loyalty percentage is always applied before the flat reward. Swapping
the order changes the charged amount.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from goagri_client.application.dtos.order_dtos import PayableBreakdown
from goagri_client.domain.entities.loyalty_entity import AppliedReward
from goagri_client.domain.value_objects.money import ZERO, to_amount

_HUNDRED = Decimal("100")


def compute_payable(
    subtotal: Decimal,
    loyalty_percentage: Decimal,
    applied_reward: Optional[AppliedReward],
) -> Decimal:
    """final = max(0, subtotal * (1 - pct/100) - reward)"""
    after_loyalty = to_amount(
        to_amount(subtotal) * (1 - to_amount(loyalty_percentage) / _HUNDRED)
    )
    reward_amount = applied_reward.discount_amount if applied_reward else ZERO
    return max(ZERO, to_amount(after_loyalty - reward_amount))


def compute_breakdown(
    subtotal: Decimal,
    loyalty_percentage: Decimal,
    applied_reward: Optional[AppliedReward],
    delivery_fee: Decimal,
) -> PayableBreakdown:
    subtotal = to_amount(subtotal)
    after_loyalty = compute_payable(subtotal, loyalty_percentage, None)
    discounted = compute_payable(subtotal, loyalty_percentage, applied_reward)
    fee = to_amount(delivery_fee)
    return PayableBreakdown(
        subtotal=subtotal,
        loyalty_discount=to_amount(subtotal - after_loyalty),
        reward_discount=to_amount(after_loyalty - discounted),
        discounted_subtotal=discounted,
        delivery_fee=fee,
        total=to_amount(discounted + fee),
    )


@dataclass
class RewardStack:
    """Loyalty tier percentage plus at most one applied manual reward"""

    loyalty_percentage: Decimal = ZERO
    applied_reward: Optional[AppliedReward] = None

    def set_loyalty_percentage(self, percentage: Decimal) -> None:
        self.loyalty_percentage = to_amount(percentage)

    def apply(self, reward: AppliedReward) -> Optional[AppliedReward]:
        """Apply reward, replacing the previous one; returns what was replaced"""
        previous = self.applied_reward
        self.applied_reward = reward
        return previous

    def remove_reward(self) -> None:
        self.applied_reward = None

    def reset(self) -> None:
        self.loyalty_percentage = ZERO
        self.applied_reward = None

    @property
    def free_shipping(self) -> bool:
        return bool(self.applied_reward and self.applied_reward.free_shipping)

    def payable(self, subtotal: Decimal) -> Decimal:
        return compute_payable(subtotal, self.loyalty_percentage, self.applied_reward)

    def breakdown(self, subtotal: Decimal, delivery_fee: Decimal) -> PayableBreakdown:
        return compute_breakdown(
            subtotal, self.loyalty_percentage, self.applied_reward, delivery_fee
        )
