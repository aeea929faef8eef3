"""
Session state

Everything the engine knows about the current session, owned by the
SessionController and passed explicitly to each use case.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from goagri_client.application.dtos.order_dtos import PlacementState
from goagri_client.application.dtos.session_dtos import SessionEvent
from goagri_client.application.use_cases.reward_stack import RewardStack
from goagri_client.domain.entities.address_book import AddressBook
from goagri_client.domain.entities.cart_entity import Cart
from goagri_client.domain.entities.loyalty_entity import LoyaltyState
from goagri_client.domain.entities.order_entity import Order
from goagri_client.domain.entities.user_profile import UserProfile
from goagri_client.domain.value_objects.session_identity import SessionIdentity


@dataclass
class SessionState:
    """Mutable session snapshot; generation changes on every identity switch"""

    identity: SessionIdentity = field(default_factory=SessionIdentity.guest)
    generation: int = 0
    user: Optional[UserProfile] = None
    token: Optional[str] = None
    cart: Cart = field(default_factory=Cart)
    orders: List[Order] = field(default_factory=list)
    loyalty: LoyaltyState = field(default_factory=LoyaltyState)
    reward_stack: RewardStack = field(default_factory=RewardStack)
    address_book: AddressBook = field(default_factory=AddressBook)
    delivery_address: str = ""
    placement_state: PlacementState = PlacementState.IDLE
    pending_checkout_url: Optional[str] = None
    loading: bool = False
    events: List[SessionEvent] = field(default_factory=list)

    def is_current(self, generation: int) -> bool:
        """True while no identity switch happened since generation was read"""
        return self.generation == generation

    def switch_identity(
        self, identity: SessionIdentity, user: Optional[UserProfile] = None
    ) -> int:
        """Move to a new identity; stale continuations see a new generation"""
        self.identity = identity
        self.user = user
        self.generation += 1
        self.cart = Cart(owner=identity.storage_key)
        self.address_book = AddressBook(owner=identity.storage_key)
        self.delivery_address = ""
        self.orders = []
        self.loyalty = LoyaltyState()
        self.reward_stack.reset()
        self.placement_state = PlacementState.IDLE
        self.pending_checkout_url = None
        self.loading = False
        return self.generation

    def emit(self, event: SessionEvent) -> None:
        self.events.append(event)

    def drain_events(self) -> List[SessionEvent]:
        """Hand pending events to the caller exactly once"""
        events, self.events = self.events, []
        return events
