"""
Order DTOs

Data Transfer Objects for order placement.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from goagri_client.domain.entities.order_entity import Order
from goagri_client.domain.value_objects.payment_method import PaymentMethod


class PlacementState(str, Enum):
    """Order placement state machine"""

    IDLE = "idle"
    VALIDATING = "validating"
    COD_SUBMITTING = "cod_submitting"
    PAYMENT_REDIRECTING = "payment_redirecting"
    COMPLETED = "completed"
    PENDING_EXTERNAL_PAYMENT = "pending_external_payment"
    FAILED = "failed"

    @property
    def in_flight(self) -> bool:
        return self in (
            PlacementState.VALIDATING,
            PlacementState.COD_SUBMITTING,
            PlacementState.PAYMENT_REDIRECTING,
        )


@dataclass
class PlaceOrderRequest:
    """Request to place the current cart as an order"""

    delivery_type: str = "in-house"
    payment_method: PaymentMethod = PaymentMethod.COD
    delivery_fee_override: Optional[Decimal] = None
    total_override: Optional[Decimal] = None


@dataclass
class PayableBreakdown:
    """How the charged total is built up"""

    subtotal: Decimal
    loyalty_discount: Decimal
    reward_discount: Decimal
    discounted_subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal


@dataclass
class OrderPlacementResponse:
    """Response for order placement"""

    success: bool
    state: PlacementState
    order: Optional[Order] = None
    checkout_url: Optional[str] = None
    breakdown: Optional[PayableBreakdown] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
