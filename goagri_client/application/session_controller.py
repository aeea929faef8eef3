"""
Session controller

Single owner of the SessionState. The presentation layer talks to the
engine only through the commands and read accessors defined here, and
consumes one-shot events through drain_events().
"""

from decimal import Decimal
from typing import Any, List, Optional, Tuple

from goagri_client.application.dtos.order_dtos import (
    OrderPlacementResponse,
    PayableBreakdown,
    PlaceOrderRequest,
    PlacementState,
)
from goagri_client.application.dtos.session_dtos import (
    LoggedIn,
    LoggedOut,
    RefreshResult,
    SessionEvent,
)
from goagri_client.application.session_state import SessionState
from goagri_client.application.use_cases.address_book_use_case import (
    AddressBookUseCase,
)
from goagri_client.application.use_cases.authed_refresh_use_case import (
    AuthedDataRefreshUseCase,
)
from goagri_client.application.use_cases.cart_reconciliation_use_case import (
    CartReconciliationUseCase,
)
from goagri_client.application.use_cases.guest_cart_merge_use_case import (
    GuestCartMergeUseCase,
)
from goagri_client.application.use_cases.inventory_sync_use_case import (
    InventorySyncUseCase,
)
from goagri_client.application.use_cases.loyalty_use_case import LoyaltyUseCase
from goagri_client.application.use_cases.order_placement_use_case import (
    OrderPlacementUseCase,
)
from goagri_client.domain.entities.cart_entity import CartLine
from goagri_client.domain.entities.loyalty_entity import (
    AppliedReward,
    LoyaltyState,
    Redemption,
    Reward,
)
from goagri_client.domain.entities.order_entity import Order
from goagri_client.domain.entities.product_entity import Product
from goagri_client.domain.entities.user_profile import UserProfile
from goagri_client.domain.repositories.commerce_gateway import (
    AuthResult,
    CommerceGateway,
)
from goagri_client.domain.repositories.key_value_store import KeyValueStore
from goagri_client.domain.value_objects.session_identity import SessionIdentity
from goagri_client.infrastructure.logging import get_structured_logger
from goagri_client.infrastructure.utilities.constants import (
    BusinessSettings,
    StorageKeys,
)
from goagri_client.infrastructure.utilities.exceptions import (
    GoAgriClientError,
    ValidationError,
)


class SessionController:
    """Commands and read accessors over one shopper session"""

    def __init__(
        self,
        gateway: CommerceGateway,
        store: KeyValueStore,
        cart_use_case: CartReconciliationUseCase,
        merge_use_case: GuestCartMergeUseCase,
        refresh_use_case: AuthedDataRefreshUseCase,
        address_book_use_case: AddressBookUseCase,
        loyalty_use_case: LoyaltyUseCase,
        order_placement_use_case: OrderPlacementUseCase,
        inventory_sync_use_case: InventorySyncUseCase,
        state: Optional[SessionState] = None,
    ):
        self._gateway = gateway
        self._store = store
        self._cart = cart_use_case
        self._merge = merge_use_case
        self._refresh = refresh_use_case
        self._addresses = address_book_use_case
        self._loyalty = loyalty_use_case
        self._orders = order_placement_use_case
        self._inventory = inventory_sync_use_case
        self._state = state or SessionState()
        self._log = get_structured_logger(__name__)

    def _bound_log(self):
        return self._log.bind(
            identity=str(self._state.identity), generation=self._state.generation
        )

    # Session lifecycle

    async def boot(self) -> SessionIdentity:
        """Restore the persisted session, or start as guest with the stored guest cart"""
        state = self._state
        token, profile = await self._read_cached_session()

        if profile is not None:
            state.token = token
            self._gateway.set_auth_token(token)
            state.switch_identity(SessionIdentity.authenticated(profile.user_id), profile)
            self._bound_log().info("session.restored")
            await self._addresses.load(state)
            await self._refresh.execute(state)
            await self._loyalty.refresh(state)
            await self._start_inventory_sync()
        else:
            await self._cart.load_guest_cart(state)
            await self._addresses.load(state)
            self._bound_log().info("session.guest", cart_lines=len(state.cart.lines))
        return state.identity

    async def login(self, email: str, password: str) -> UserProfile:
        if not email or not password:
            raise ValidationError("Email and password are required", "email")
        result = await self._gateway.login(email.strip(), password)
        return await self._establish(result, registered=False)

    async def register(self, name: str, email: str, password: str) -> UserProfile:
        if not name or not email or not password:
            raise ValidationError("Name, email and password are required", "email")
        result = await self._gateway.register(name.strip(), email.strip(), password)
        return await self._establish(result, registered=True)

    async def _establish(self, result: AuthResult, registered: bool) -> UserProfile:
        """Post-auth sequence: persist, switch identity, merge, refresh, loyalty"""
        state = self._state
        user = result.user
        try:
            await self._store.set(StorageKeys.SESSION_TOKEN, result.token)
            await self._store.set(StorageKeys.CACHED_USER, user.to_dict())
        except GoAgriClientError as e:
            self._bound_log().error("session.persist_failed", error=str(e))

        state.token = result.token
        self._gateway.set_auth_token(result.token)
        state.switch_identity(SessionIdentity.authenticated(user.user_id), user)
        state.emit(LoggedIn(display_name=user.display_name, registered=registered))
        self._bound_log().info("session.logged_in", registered=registered)

        await self._addresses.load(state)
        # Merge must finish before the refresh reads the cart
        await self._merge.execute(state)
        await self._refresh.execute(state)
        await self._loyalty.refresh(state)
        await self._start_inventory_sync()
        return user

    async def logout(self) -> None:
        """Forget the token and cached profile; addresses and guest cart stay stored"""
        state = self._state
        previous = str(state.identity)
        try:
            await self._store.remove_many(
                [StorageKeys.SESSION_TOKEN, StorageKeys.CACHED_USER]
            )
        except GoAgriClientError as e:
            self._bound_log().error("session.clear_failed", error=str(e))

        await self._stop_inventory_sync()
        state.token = None
        self._gateway.set_auth_token(None)
        state.switch_identity(SessionIdentity.guest())
        await self._addresses.load(state)
        state.emit(LoggedOut())
        self._bound_log().info("session.logged_out", previous=previous)

    async def refresh(self) -> RefreshResult:
        return await self._refresh.execute(self._state)

    async def _read_cached_session(self) -> Tuple[Optional[str], Optional[UserProfile]]:
        try:
            token = await self._store.get(StorageKeys.SESSION_TOKEN)
            raw_user = await self._store.get(StorageKeys.CACHED_USER)
        except GoAgriClientError as e:
            self._log.warning("session.restore_failed", error=str(e))
            return None, None

        if not isinstance(raw_user, dict):
            return token, None
        try:
            return token, UserProfile.from_dict(raw_user)
        except ValueError as e:
            self._log.warning("session.cached_user_invalid", error=str(e))
            return token, None

    async def _start_inventory_sync(self) -> None:
        try:
            await self._inventory.start(self._state)
        except Exception as e:
            self._bound_log().warning("inventory.start_failed", error=str(e))

    async def _stop_inventory_sync(self) -> None:
        try:
            await self._inventory.stop()
        except Exception as e:
            self._bound_log().warning("inventory.stop_failed", error=str(e))

    # Cart commands

    async def add_to_cart(self, product: Product) -> CartLine:
        return await self._cart.add(self._state, product)

    async def set_quantity(
        self, product_id: str, quantity: int, max_stock: Optional[int] = None
    ) -> bool:
        return await self._cart.set_quantity(self._state, product_id, quantity, max_stock)

    async def increment(self, product_id: str, stock: Optional[int] = None) -> bool:
        return await self._cart.increment(self._state, product_id, stock)

    async def decrement(self, product_id: str) -> bool:
        return await self._cart.decrement(self._state, product_id)

    async def remove_from_cart(self, product_id: str) -> bool:
        return await self._cart.remove(self._state, product_id)

    async def clear_cart(self) -> None:
        await self._cart.clear(self._state)

    # Address commands

    async def add_address(self, text: str) -> str:
        return await self._addresses.add(self._state, text)

    async def remove_address(self, text: str) -> bool:
        return await self._addresses.remove(self._state, text)

    async def set_default_address(self, text: str) -> str:
        return await self._addresses.set_default(self._state, text)

    def select_address(self, text: str) -> str:
        return self._addresses.select(self._state, text)

    # Loyalty and rewards

    async def refresh_loyalty(self) -> LoyaltyState:
        return await self._loyalty.refresh(self._state)

    async def issue_loyalty_card(self) -> LoyaltyState:
        return await self._loyalty.issue_card(self._state)

    async def load_available_rewards(self) -> List[Reward]:
        return await self._loyalty.available_rewards(self._state)

    async def redeem_reward(self, name: str) -> Redemption:
        return await self._loyalty.redeem(self._state, name)

    async def load_redemption_history(self) -> List[Redemption]:
        return await self._loyalty.redemption_history(self._state)

    def apply_reward(self, reward: Reward) -> AppliedReward:
        return self._loyalty.apply_reward(self._state, reward)

    def apply_manual_reward(
        self, name: str, discount_amount: Any, free_shipping: bool = False
    ) -> AppliedReward:
        return self._loyalty.apply_manual_reward(
            self._state, name, discount_amount, free_shipping
        )

    def remove_reward(self) -> None:
        self._loyalty.remove_reward(self._state)

    # Checkout

    def preview_totals(
        self,
        delivery_type: str = BusinessSettings.DEFAULT_DELIVERY_TYPE,
        delivery_fee_override: Optional[Decimal] = None,
    ) -> PayableBreakdown:
        return self._orders.preview_totals(self._state, delivery_type, delivery_fee_override)

    async def place_order(self, request: PlaceOrderRequest) -> OrderPlacementResponse:
        response = await self._orders.place(self._state, request)
        self._bound_log().info(
            "order.placement",
            success=response.success,
            state=response.state.value,
            error_code=response.error_code,
        )
        return response

    async def confirm_external_payment(self) -> OrderPlacementResponse:
        return await self._orders.confirm_external_payment(self._state)

    def cancel_external_payment(self) -> bool:
        return self._orders.cancel_external_payment(self._state)

    # UI preference

    async def get_view_mode(self) -> str:
        try:
            mode = await self._store.get(StorageKeys.VIEW_MODE)
        except GoAgriClientError as e:
            self._log.warning("view_mode.read_failed", error=str(e))
            mode = None
        return mode or BusinessSettings.DEFAULT_VIEW_MODE

    async def set_view_mode(self, mode: str) -> str:
        if not mode or not mode.strip():
            raise ValidationError("View mode cannot be empty", "view_mode")
        await self._store.set(StorageKeys.VIEW_MODE, mode.strip())
        return mode.strip()

    # Events

    def drain_events(self) -> List[SessionEvent]:
        return self._state.drain_events()

    # Read accessors

    @property
    def identity(self) -> SessionIdentity:
        return self._state.identity

    @property
    def is_authenticated(self) -> bool:
        return self._state.identity.is_authenticated

    @property
    def user(self) -> Optional[UserProfile]:
        return self._state.user

    @property
    def cart_lines(self) -> Tuple[CartLine, ...]:
        return self._state.cart.snapshot()

    @property
    def cart_subtotal(self) -> Decimal:
        return self._state.cart.subtotal

    @property
    def cart_item_count(self) -> int:
        return self._state.cart.item_count

    @property
    def payable_subtotal(self) -> Decimal:
        """Cart subtotal after the loyalty percentage and applied reward"""
        return self._state.reward_stack.payable(self._state.cart.subtotal)

    @property
    def orders(self) -> Tuple[Order, ...]:
        return tuple(self._state.orders)

    @property
    def loyalty(self) -> LoyaltyState:
        return self._state.loyalty

    @property
    def applied_reward(self) -> Optional[AppliedReward]:
        return self._state.reward_stack.applied_reward

    @property
    def loyalty_percentage(self) -> Decimal:
        return self._state.reward_stack.loyalty_percentage

    @property
    def addresses(self) -> Tuple[str, ...]:
        return tuple(self._state.address_book.addresses)

    @property
    def default_address(self) -> Optional[str]:
        return self._state.address_book.default

    @property
    def delivery_address(self) -> str:
        return self._state.delivery_address

    @property
    def placement_state(self) -> PlacementState:
        return self._state.placement_state

    @property
    def pending_checkout_url(self) -> Optional[str]:
        return self._state.pending_checkout_url

    @property
    def loading(self) -> bool:
        return self._state.loading
