"""
Authed data refresh use case

Re-fetches cart, order history and deliveries concurrently after login,
merge and order completion. Each read degrades to an empty result on
failure; deliveries are joined onto orders for display only.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List

from goagri_client.application.dtos.session_dtos import RefreshResult
from goagri_client.application.session_state import SessionState
from goagri_client.application.use_cases.cart_reconciliation_use_case import (
    CartReconciliationUseCase,
)
from goagri_client.domain.entities.order_entity import Delivery, Order
from goagri_client.domain.repositories.commerce_gateway import CommerceGateway
from goagri_client.infrastructure.logging import PerformanceLogger


def enrich_orders(orders: Iterable[Order], deliveries: Iterable[Delivery]) -> List[Order]:
    """Attach each order's delivery record by order id; others are unchanged"""
    by_order: Dict[str, Delivery] = {}
    for delivery in deliveries:
        if delivery.order_id:
            by_order[delivery.order_id] = delivery
    return [
        order.with_delivery(by_order[order.id]) if order.id in by_order else order
        for order in orders
    ]


class AuthedDataRefreshUseCase:
    """Refresh orchestrator for authenticated sessions"""

    def __init__(
        self, gateway: CommerceGateway, cart_use_case: CartReconciliationUseCase
    ):
        self._gateway = gateway
        self._cart_use_case = cart_use_case
        self._logger = logging.getLogger(self.__class__.__name__)

    async def execute(self, state: SessionState) -> RefreshResult:
        identity = state.identity
        generation = state.generation
        if not identity.is_authenticated:
            self._logger.debug("Refresh skipped for guest session")
            return RefreshResult(applied=False)

        state.loading = True
        try:
            with PerformanceLogger(
                "authed_refresh", self._logger, {"user_key": identity.storage_key}
            ):
                cart_result, orders_result, deliveries_result = await asyncio.gather(
                    self._gateway.fetch_cart(identity.user_id),
                    self._gateway.fetch_orders(identity.user_id),
                    self._gateway.list_my_deliveries(),
                    return_exceptions=True,
                )
        finally:
            if state.is_current(generation):
                state.loading = False

        cart_lines = self._degrade("cart", cart_result)
        orders = self._degrade("orders", orders_result)
        deliveries = self._degrade("deliveries", deliveries_result)
        result = RefreshResult(
            cart_lines=list(cart_lines),
            orders=enrich_orders(orders, deliveries),
        )

        if not state.is_current(generation):
            self._logger.warning(
                "Discarding stale refresh for %s (generation %s, now %s)",
                identity,
                generation,
                state.generation,
            )
            result.applied = False
            return result

        self._cart_use_case.replace(state, result.cart_lines)
        state.orders = list(result.orders)
        self._logger.info(
            "🔄 Refreshed %s: %s cart lines, %s orders",
            identity,
            len(result.cart_lines),
            len(result.orders),
        )
        return result

    def _degrade(self, label: str, result: Any) -> List[Any]:
        if isinstance(result, BaseException):
            self._logger.warning("Refresh of %s failed, using empty result: %s", label, result)
            return []
        return list(result or [])
