"""
Gateway response schemas

Exactly one model per endpoint response. Envelope mismatches surface as
pydantic validation errors, which the gateway turns into
GatewayResponseError.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from goagri_client.domain.entities.cart_entity import CartLine
from goagri_client.domain.entities.loyalty_entity import (
    LoyaltyState,
    Redemption,
    Reward,
)
from goagri_client.domain.entities.order_entity import Delivery, Order
from goagri_client.domain.entities.user_profile import UserProfile


def _ref_id(value: Any) -> Any:
    """Populated references arrive as objects; keep only their id"""
    if isinstance(value, dict):
        return value.get("_id") or value.get("id")
    return value


RefId = Annotated[str, BeforeValidator(_ref_id)]


class GatewaySchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class CartItemSchema(GatewaySchema):
    product_id: RefId
    name: str = ""
    price: Decimal = Field(default=Decimal("0"), ge=0)
    image_url: Optional[str] = None
    quantity: int = Field(default=1, ge=1)

    def to_entity(self) -> CartLine:
        return CartLine(
            product_id=self.product_id,
            name=self.name,
            price=self.price,
            image_ref=self.image_url or "",
            quantity=self.quantity,
        )


class CartResponse(GatewaySchema):
    """GET cart/{userId}"""

    items: List[CartItemSchema] = Field(default_factory=list)

    def to_entities(self) -> List[CartLine]:
        return [item.to_entity() for item in self.items]


class AuthResponse(GatewaySchema):
    """POST auth/login and auth/register"""

    token: str = Field(min_length=1)
    user: Dict[str, Any]

    @field_validator("user")
    @classmethod
    def user_has_key(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        if not (value.get("_id") or value.get("id") or value.get("email")):
            raise ValueError("user needs _id, id or email")
        return value

    def to_profile(self) -> UserProfile:
        return UserProfile.from_dict(self.user)


class DeliverySchema(GatewaySchema):
    id: str = Field(alias="_id")
    order: Optional[RefId] = None
    status: str = ""
    driver_phone: Optional[str] = None

    def to_entity(self, raw: Dict[str, Any]) -> Delivery:
        return Delivery(
            id=self.id,
            order_id=self.order or "",
            status=self.status,
            driver_phone=self.driver_phone,
            details=raw,
        )


class OrderSchema(GatewaySchema):
    id: str = Field(alias="_id")
    items: List[CartItemSchema] = Field(default_factory=list)
    total: Decimal = Decimal("0")
    delivery_fee: Decimal = Decimal("0")
    address: Optional[str] = None
    delivery_type: Optional[str] = None
    payment_method: Optional[str] = None
    status: str = "Pending"
    created_at: Optional[datetime] = None

    def to_entity(self) -> Order:
        return Order(
            id=self.id,
            items=tuple(item.to_entity() for item in self.items),
            total=self.total,
            delivery_fee=self.delivery_fee,
            address=self.address or "",
            delivery_type=self.delivery_type or "",
            payment_method=self.payment_method or "",
            created_at=self.created_at,
            status=self.status,
        )


class OrderCreatedResponse(GatewaySchema):
    """POST orders (cash on delivery)"""

    order: OrderSchema


class CheckoutSchema(GatewaySchema):
    checkout_url: str = Field(min_length=1)


class ExternalPaymentResponse(GatewaySchema):
    """POST orders/epayment"""

    payment: CheckoutSchema


class DeliveriesResponse(GatewaySchema):
    """GET delivery/mine"""

    deliveries: List[Dict[str, Any]]

    def to_entities(self) -> List[Delivery]:
        return [
            DeliverySchema.model_validate(raw).to_entity(raw) for raw in self.deliveries
        ]


class LoyaltySchema(GatewaySchema):
    points: int = Field(default=0, ge=0)
    discount_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    card_type: Optional[str] = None
    card_issued: bool = False

    @field_validator("discount_percentage", mode="before")
    @classmethod
    def none_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    def to_entity(self) -> LoyaltyState:
        return LoyaltyState(
            points=self.points,
            discount_percentage=self.discount_percentage,
            tier_name=self.card_type or "",
            card_issued=self.card_issued,
        )


class LoyaltyStatusResponse(GatewaySchema):
    """GET loyalty/status"""

    loyalty: LoyaltySchema


class RewardSchema(GatewaySchema):
    name: str = Field(min_length=1)
    cost: int = 0
    type: str
    value: Decimal = Decimal("0")
    description: str = ""

    def to_entity(self) -> Reward:
        return Reward(
            name=self.name,
            cost=self.cost,
            reward_type=self.type,
            value=self.value,
            description=self.description,
        )


class RewardsResponse(GatewaySchema):
    """GET loyalty/rewards"""

    rewards: List[RewardSchema]


class RedemptionSchema(GatewaySchema):
    reward_name: str = Field(min_length=1)
    points_spent: int = 0
    redeemed_at: Optional[datetime] = None

    def to_entity(self) -> Redemption:
        return Redemption(
            reward_name=self.reward_name,
            points_spent=self.points_spent,
            redeemed_at=self.redeemed_at,
        )


class RedeemResponse(GatewaySchema):
    """POST loyalty/redeem"""

    redemption: RedemptionSchema


class RedemptionHistoryResponse(GatewaySchema):
    """GET loyalty/redemptions"""

    redemptions: List[RedemptionSchema]


class ErrorBody(GatewaySchema):
    message: Optional[Any] = None
