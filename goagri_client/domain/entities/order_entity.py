"""
Order Entity

Orders are created by the backend, which owns their id. The delivery record
is joined on the client for display only.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from goagri_client.domain.entities.cart_entity import CartLine


@dataclass(frozen=True)
class Delivery:
    """Delivery assignment for an order"""

    id: str
    order_id: str
    status: str = ""
    driver_phone: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Order:
    """Placed order with its item snapshot"""

    id: str
    items: Tuple[CartLine, ...]
    total: Decimal
    delivery_fee: Decimal
    address: str
    delivery_type: str
    payment_method: str
    created_at: Optional[datetime] = None
    status: str = "Pending"
    delivery: Optional[Delivery] = None

    def with_delivery(self, delivery: Delivery) -> "Order":
        return replace(self, delivery=delivery)
