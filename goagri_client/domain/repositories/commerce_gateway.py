"""
Commerce gateway interface

Defines the call/response contract of the remote backend: catalogue cart,
orders, deliveries, loyalty and payments.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from goagri_client.domain.entities.cart_entity import CartLine
from goagri_client.domain.entities.loyalty_entity import (
    AppliedReward,
    LoyaltyState,
    Redemption,
    Reward,
)
from goagri_client.domain.entities.order_entity import Delivery, Order
from goagri_client.domain.entities.user_profile import UserProfile


@dataclass(frozen=True)
class AuthResult:
    """Token and account returned by login/registration"""

    token: str
    user: UserProfile


@dataclass(frozen=True)
class OrderPayload:
    """Body shared by the COD and external-payment order endpoints"""

    items: Sequence[CartLine]
    total: Decimal
    delivery_fee: Decimal
    address: str
    delivery_type: str
    payment_method: str
    loyalty_reward: Optional[AppliedReward] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "items": [line.to_dict() for line in self.items],
            "total": float(self.total),
            "deliveryFee": float(self.delivery_fee),
            "address": self.address,
            "deliveryType": self.delivery_type,
            "paymentMethod": self.payment_method,
            "loyaltyReward": None,
        }
        if self.loyalty_reward is not None:
            body["loyaltyReward"] = {
                "name": self.loyalty_reward.name,
                "discount": float(self.loyalty_reward.discount_amount),
                "freeShipping": self.loyalty_reward.free_shipping,
            }
        body.update(self.extra)
        return body


class CommerceGateway(ABC):
    """Gateway interface for the commerce backend"""

    @abstractmethod
    def set_auth_token(self, token: Optional[str]) -> None:
        """Attach (or drop) the bearer token for subsequent calls"""

    @abstractmethod
    async def login(self, email: str, password: str) -> AuthResult:
        """Authenticate an existing account"""

    @abstractmethod
    async def register(self, name: str, email: str, password: str) -> AuthResult:
        """Create an account and authenticate it"""

    @abstractmethod
    async def fetch_cart(self, user_id: str) -> List[CartLine]:
        """Get the server-side cart; a missing cart is an empty list"""

    @abstractmethod
    async def save_cart(self, user_id: str, items: Sequence[CartLine]) -> None:
        """Replace the server-side cart with items"""

    @abstractmethod
    async def fetch_orders(self, user_id: str) -> List[Order]:
        """Get the order history of a user"""

    @abstractmethod
    async def create_cod_order(self, payload: OrderPayload) -> Order:
        """Create a cash-on-delivery order"""

    @abstractmethod
    async def create_external_payment_order(self, payload: OrderPayload) -> str:
        """Start a hosted payment; returns the checkout redirect URL"""

    @abstractmethod
    async def list_my_deliveries(self) -> List[Delivery]:
        """Get all deliveries for the authenticated user"""

    @abstractmethod
    async def get_loyalty_status(self) -> LoyaltyState:
        """Get the loyalty standing of the authenticated user"""

    @abstractmethod
    async def issue_loyalty_card(self) -> None:
        """Ask the backend to issue a loyalty card"""

    @abstractmethod
    async def get_available_rewards(self) -> List[Reward]:
        """Get the reward catalogue"""

    @abstractmethod
    async def redeem_reward(self, name: str) -> Redemption:
        """Spend points on the named reward"""

    @abstractmethod
    async def get_redemption_history(self) -> List[Redemption]:
        """Get past redemptions"""
