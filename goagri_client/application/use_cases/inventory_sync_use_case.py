"""
Inventory sync use case

Keeps cart lines in step with live catalogue changes pushed over the
realtime channel while a user is signed in.
"""

import logging
from typing import Any, Dict, Optional

from goagri_client.application.session_state import SessionState
from goagri_client.application.use_cases.cart_reconciliation_use_case import (
    CartReconciliationUseCase,
)
from goagri_client.domain.repositories.realtime_channel import RealtimeChannel
from goagri_client.infrastructure.utilities.constants import RealtimeEvents


class InventorySyncUseCase:
    """Subscribe to inventory events and reconcile the active cart"""

    def __init__(
        self,
        channel: Optional[RealtimeChannel],
        cart_use_case: CartReconciliationUseCase,
    ):
        self._channel = channel
        self._cart_use_case = cart_use_case
        self._state: Optional[SessionState] = None
        self._generation: Optional[int] = None
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def active(self) -> bool:
        return self._state is not None

    async def start(self, state: SessionState) -> bool:
        if self._channel is None or not state.identity.is_authenticated:
            return False
        if self.active:
            await self.stop()

        await self._channel.connect(state.token or "")
        self._channel.on(RealtimeEvents.INVENTORY_UPDATE, self.handle_update)
        self._channel.on(RealtimeEvents.INVENTORY_DELETED, self.handle_deleted)
        self._state = state
        self._generation = state.generation
        self._logger.info("📡 Inventory sync started for %s", state.identity)
        return True

    async def stop(self) -> None:
        if self._channel is None or not self.active:
            return
        self._channel.off(RealtimeEvents.INVENTORY_UPDATE)
        self._channel.off(RealtimeEvents.INVENTORY_DELETED)
        self._state = None
        self._generation = None
        await self._channel.disconnect()
        self._logger.info("📡 Inventory sync stopped")

    async def handle_update(self, payload: Dict[str, Any]) -> bool:
        state = self._current_state()
        product_id = self._product_id(payload)
        if state is None or not product_id:
            return False
        try:
            return await self._cart_use_case.apply_product_update(
                state, product_id, payload.get("name"), payload.get("price")
            )
        except ValueError as e:
            self._logger.warning("Ignoring bad inventory update for %s: %s", product_id, e)
            return False

    async def handle_deleted(self, payload: Dict[str, Any]) -> bool:
        state = self._current_state()
        product_id = self._product_id(payload)
        if state is None or not product_id:
            return False
        return await self._cart_use_case.remove(state, product_id)

    def _current_state(self) -> Optional[SessionState]:
        state = self._state
        if state is None or not state.is_current(self._generation):
            return None
        return state

    @staticmethod
    def _product_id(payload: Dict[str, Any]) -> str:
        if not isinstance(payload, dict):
            return ""
        return str(payload.get("productId") or payload.get("_id") or "").strip()
