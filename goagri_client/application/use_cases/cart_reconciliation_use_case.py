"""
Cart reconciliation use case

The only writer of the active cart. Every mutation is followed by a persist:
the full line list goes to the gateway when authenticated, or to the local
store when browsing as a guest.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from goagri_client.application.session_state import SessionState
from goagri_client.domain.entities.cart_entity import CartLine
from goagri_client.domain.entities.product_entity import Product
from goagri_client.domain.repositories.commerce_gateway import CommerceGateway
from goagri_client.domain.repositories.key_value_store import KeyValueStore
from goagri_client.infrastructure.utilities.constants import StorageKeys
from goagri_client.infrastructure.utilities.exceptions import (
    GoAgriClientError,
    OutOfStockError,
    StockExceededError,
)


class CartReconciliationUseCase:
    """
    Use case for cart mutations

    Handles:
    1. Adding products with stock checks
    2. Setting, incrementing and decrementing quantities
    3. Removing lines and clearing the cart
    4. Persisting the cart after every change
    """

    def __init__(self, gateway: CommerceGateway, store: KeyValueStore):
        self._gateway = gateway
        self._store = store
        self._logger = logging.getLogger(self.__class__.__name__)

    async def add(self, state: SessionState, product: Product) -> CartLine:
        """Add one unit of product; stock is checked against last-known data"""
        if product.stock <= 0:
            raise OutOfStockError(product.name)

        current = state.cart.quantity_of(product.id)
        if current + 1 > product.stock:
            raise StockExceededError(product.name, product.stock)

        existing = state.cart.find(product.id)
        line = (
            existing.with_quantity(existing.quantity + 1)
            if existing
            else CartLine.from_product(product)
        )
        state.cart.upsert(line)
        self._logger.info(
            "🛒 CART ADD: %s x%s (owner %s)", product.id, line.quantity, state.cart.owner
        )

        await self.persist(state)
        return line

    async def set_quantity(
        self,
        state: SessionState,
        product_id: str,
        quantity: int,
        max_stock: Optional[int] = None,
    ) -> bool:
        """
        Set a line's quantity. Zero or less removes the line.

        No stock check happens here unless max_stock is given, in which case
        the quantity is clamped to it.
        """
        quantity = max(0, int(quantity))
        if max_stock is not None:
            quantity = min(quantity, max(0, int(max_stock)))

        changed = state.cart.set_line_quantity(product_id, quantity)
        if not changed:
            self._logger.debug("Cart has no line for %s", product_id)
            return False

        self._logger.info("🛒 CART SET: %s -> %s", product_id, quantity)
        await self.persist(state)
        return True

    async def increment(
        self, state: SessionState, product_id: str, stock: Optional[int] = None
    ) -> bool:
        line = state.cart.find(product_id)
        if line is None:
            return False
        if stock is not None and line.quantity + 1 > stock:
            raise StockExceededError(line.name, stock)
        return await self.set_quantity(state, product_id, line.quantity + 1)

    async def decrement(self, state: SessionState, product_id: str) -> bool:
        return await self.set_quantity(
            state, product_id, state.cart.quantity_of(product_id) - 1
        )

    async def remove(self, state: SessionState, product_id: str) -> bool:
        removed = state.cart.remove(product_id)
        if removed:
            self._logger.info("🗑️ CART REMOVE: %s", product_id)
            await self.persist(state)
        return removed

    async def clear(self, state: SessionState) -> None:
        state.cart.clear()
        self._logger.info("🧹 CART CLEARED for %s", state.cart.owner)
        await self.persist(state)

    def replace(self, state: SessionState, lines: Iterable[CartLine]) -> None:
        """Swap in lines fetched from elsewhere; no persist"""
        state.cart.replace_lines(lines)

    async def apply_product_update(
        self, state: SessionState, product_id: str, name: Optional[str], price: Any
    ) -> bool:
        """Refresh name/price of a cart line from a live inventory update"""
        line = state.cart.find(product_id)
        if line is None:
            return False

        changes: Dict[str, Any] = {}
        if name:
            changes["name"] = name
        if price is not None:
            changes["price"] = price
        if not changes:
            return False

        state.cart.upsert(
            CartLine(
                product_id=line.product_id,
                name=changes.get("name", line.name),
                price=changes.get("price", line.price),
                image_ref=line.image_ref,
                quantity=line.quantity,
            )
        )
        await self.persist(state)
        return True

    async def load_guest_cart(self, state: SessionState) -> List[CartLine]:
        """Read the stored guest cart into the active cart"""
        lines = await self.read_guest_lines()
        state.cart.replace_lines(lines)
        self._logger.info("Loaded %s guest cart lines", len(state.cart.lines))
        return state.cart.lines

    async def read_guest_lines(self) -> List[CartLine]:
        try:
            blob = await self._store.get(StorageKeys.GUEST_CART)
        except GoAgriClientError as e:
            self._logger.warning("Could not read guest cart: %s", e)
            return []
        return self._parse_lines(blob)

    def _parse_lines(self, blob: Any) -> List[CartLine]:
        if not isinstance(blob, dict):
            return []
        lines: List[CartLine] = []
        for raw in blob.get("items") or []:
            try:
                lines.append(CartLine.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                self._logger.warning("Skipping malformed stored cart line %r: %s", raw, e)
        return lines

    async def persist(self, state: SessionState) -> bool:
        """
        Write the whole cart to its owner's storage.

        Failures are logged and swallowed; the in-memory cart stays the
        source of truth for this session.
        """
        generation = state.generation
        identity = state.identity
        lines = state.cart.snapshot()
        try:
            if identity.is_authenticated:
                await self._gateway.save_cart(identity.user_id, lines)
            else:
                await self._store.set(
                    StorageKeys.GUEST_CART, {"items": [line.to_dict() for line in lines]}
                )
            return True
        except GoAgriClientError as e:
            self._logger.error(
                "💥 CART PERSIST FAILED for %s (generation %s): %s",
                identity,
                generation,
                e,
            )
            return False
