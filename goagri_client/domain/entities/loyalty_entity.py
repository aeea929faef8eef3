"""
Loyalty entities
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from goagri_client.domain.value_objects.money import ZERO, to_amount


@dataclass(frozen=True)
class LoyaltyState:
    """Loyalty standing as reported by the backend"""

    points: int = 0
    discount_percentage: Decimal = ZERO
    tier_name: str = ""
    card_issued: bool = False

    def __post_init__(self):
        if self.points < 0:
            raise ValueError("Loyalty points cannot be negative")
        percentage = to_amount(self.discount_percentage)
        if not Decimal("0") <= percentage <= Decimal("100"):
            raise ValueError("Discount percentage must be between 0 and 100")
        object.__setattr__(self, "discount_percentage", percentage)


@dataclass(frozen=True)
class AppliedReward:
    """The single manual reward applied at checkout"""

    name: str
    discount_amount: Decimal = ZERO
    free_shipping: bool = False

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Reward name cannot be empty")
        amount = to_amount(self.discount_amount)
        if amount < 0:
            raise ValueError("Reward discount cannot be negative")
        object.__setattr__(self, "discount_amount", amount)


@dataclass(frozen=True)
class Reward:
    """Catalogue reward redeemable with points"""

    name: str
    cost: int
    reward_type: str
    value: Decimal = ZERO
    description: str = ""


@dataclass(frozen=True)
class Redemption:
    """A past reward redemption"""

    reward_name: str
    points_spent: int = 0
    redeemed_at: Optional[datetime] = None
