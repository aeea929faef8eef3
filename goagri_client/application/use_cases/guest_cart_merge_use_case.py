"""
Guest cart merge use case

Runs once per successful login or registration, before the post-login
refresh. The guest cart is folded into the account's server cart
additively; a failure anywhere aborts the merge without failing login.
"""

import logging
from typing import Dict, Iterable, List

from goagri_client.application.dtos.session_dtos import GuestCartMerged
from goagri_client.application.session_state import SessionState
from goagri_client.application.use_cases.cart_reconciliation_use_case import (
    CartReconciliationUseCase,
)
from goagri_client.domain.entities.cart_entity import CartLine
from goagri_client.domain.repositories.commerce_gateway import CommerceGateway
from goagri_client.domain.repositories.key_value_store import KeyValueStore
from goagri_client.domain.value_objects.session_identity import SessionIdentity
from goagri_client.infrastructure.utilities.constants import (
    BusinessSettings,
    StorageKeys,
)
from goagri_client.infrastructure.utilities.exceptions import GoAgriClientError


def merge_cart_lines(
    server_lines: Iterable[CartLine],
    guest_lines: Iterable[CartLine],
    min_quantity: int = BusinessSettings.MERGE_MIN_QUANTITY,
    max_quantity: int = BusinessSettings.MERGE_MAX_QUANTITY,
) -> List[CartLine]:
    """
    Combine two carts by product id.

    The server list is folded first so its name, price and image win; guest
    quantities are then added on top. Each merged quantity is clamped to
    [min_quantity, max_quantity].
    """
    merged: Dict[str, CartLine] = {}
    for line in list(server_lines) + list(guest_lines):
        existing = merged.get(line.product_id)
        if existing is None:
            merged[line.product_id] = line
        else:
            merged[line.product_id] = existing.with_quantity(
                existing.quantity + line.quantity
            )

    return [
        line.with_quantity(max(min_quantity, min(max_quantity, line.quantity)))
        for line in merged.values()
    ]


class GuestCartMergeUseCase:
    """Fold the locally stored guest cart into the account cart"""

    def __init__(
        self,
        gateway: CommerceGateway,
        store: KeyValueStore,
        cart_use_case: CartReconciliationUseCase,
    ):
        self._gateway = gateway
        self._store = store
        self._cart_use_case = cart_use_case
        self._logger = logging.getLogger(self.__class__.__name__)

    async def execute(self, state: SessionState) -> bool:
        """Returns True when a merge was written; never raises"""
        identity = state.identity
        generation = state.generation
        if not identity.is_authenticated:
            self._logger.debug("Merge skipped for guest session")
            return False

        try:
            guest_lines = await self._cart_use_case.read_guest_lines()
            if not guest_lines:
                self._logger.debug("No guest cart to merge for %s", identity)
                return False

            server_lines = await self._gateway.fetch_cart(identity.user_id)
            merged = merge_cart_lines(server_lines, guest_lines)

            if not state.is_current(generation):
                self._logger.warning(
                    "Session changed during merge for %s, abandoning", identity
                )
                return False

            await self._gateway.save_cart(identity.user_id, merged)
        except Exception as e:
            # Login must never fail because of the merge
            self._logger.error("💥 GUEST CART MERGE FAILED for %s: %s", identity, e)
            return False

        # The account cart already holds the guest lines from here on
        await self._clear_guest_cart(identity)

        if state.is_current(generation):
            state.emit(GuestCartMerged(line_count=len(merged)))
        self._logger.info(
            "✅ Merged %s guest lines into %s (%s lines)",
            len(guest_lines),
            identity,
            len(merged),
        )
        return True

    async def _clear_guest_cart(self, identity: SessionIdentity) -> None:
        try:
            await self._store.remove(StorageKeys.GUEST_CART)
        except GoAgriClientError as e:
            self._logger.error(
                "💥 Merged cart saved for %s but guest cart was not cleared: %s",
                identity,
                e,
            )
