"""
Session DTOs

One-shot session events for the presentation layer, and refresh results.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from goagri_client.domain.entities.cart_entity import CartLine
from goagri_client.domain.entities.order_entity import Order


@dataclass(frozen=True)
class SessionEvent:
    """Base class for events emitted once and consumed by the UI"""


@dataclass(frozen=True)
class LoggedIn(SessionEvent):
    display_name: str
    registered: bool = False


@dataclass(frozen=True)
class LoggedOut(SessionEvent):
    pass


@dataclass(frozen=True)
class GuestCartMerged(SessionEvent):
    line_count: int


@dataclass(frozen=True)
class OrderCompleted(SessionEvent):
    order_id: Optional[str]


@dataclass(frozen=True)
class ExternalPaymentPending(SessionEvent):
    checkout_url: str


@dataclass
class RefreshResult:
    """Cart and enriched order history fetched after login or checkout"""

    cart_lines: List[CartLine] = field(default_factory=list)
    orders: List[Order] = field(default_factory=list)
    applied: bool = True
