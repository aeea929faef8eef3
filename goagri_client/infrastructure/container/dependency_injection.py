"""
Dependency Injection Container

Wires the local store, the commerce gateway, the use cases and the session
controller for one client process.
"""

import logging
from typing import Any, Dict, Optional

from ...application.session_controller import SessionController
from ...application.use_cases.address_book_use_case import AddressBookUseCase
from ...application.use_cases.authed_refresh_use_case import AuthedDataRefreshUseCase
from ...application.use_cases.cart_reconciliation_use_case import (
    CartReconciliationUseCase,
)
from ...application.use_cases.guest_cart_merge_use_case import GuestCartMergeUseCase
from ...application.use_cases.inventory_sync_use_case import InventorySyncUseCase
from ...application.use_cases.loyalty_use_case import LoyaltyUseCase
from ...application.use_cases.order_placement_use_case import OrderPlacementUseCase
from ...domain.repositories.commerce_gateway import CommerceGateway
from ...domain.repositories.key_value_store import KeyValueStore
from ...domain.repositories.realtime_channel import RealtimeChannel
from ..configuration.config import Settings, get_config
from ..gateway.http_commerce_gateway import HttpCommerceGateway
from ..persistence.database import StoreDatabaseManager
from ..persistence.sqlalchemy_key_value_store import SQLAlchemyKeyValueStore


class DependencyContainer:
    """
    Dependency injection container

    Manages the instantiation and lifecycle of:
    - The local store and the commerce gateway (Infrastructure layer)
    - Use Cases and the session controller (Application layer)

    A gateway, store or realtime channel passed in replaces the default
    implementation.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        gateway: Optional[CommerceGateway] = None,
        store: Optional[KeyValueStore] = None,
        realtime_channel: Optional[RealtimeChannel] = None,
    ):
        self._config = config or get_config()
        self._instances: Dict[str, Any] = {}
        self._logger = logging.getLogger(self.__class__.__name__)
        self._setup_dependencies(gateway, store, realtime_channel)

    def _setup_dependencies(self, gateway, store, realtime_channel):
        self._logger.info("Setting up dependency injection container...")
        self._register_infrastructure(gateway, store, realtime_channel)
        self._register_use_cases()
        self._logger.info("Dependency injection container setup complete")

    def _register_infrastructure(self, gateway, store, realtime_channel):
        if store is None:
            db_manager = StoreDatabaseManager(config=self._config)
            db_manager.create_tables()
            self._instances["db_manager"] = db_manager
            store = SQLAlchemyKeyValueStore(db_manager)
        if gateway is None:
            gateway = HttpCommerceGateway(
                base_url=self._config.api_url,
                timeout=self._config.request_timeout_seconds,
            )

        self._instances["store"] = store
        self._instances["gateway"] = gateway
        self._instances["realtime_channel"] = realtime_channel
        if realtime_channel is None:
            self._logger.warning("No realtime channel, inventory sync disabled")

    def _register_use_cases(self):
        gateway = self.get_gateway()
        store = self.get_store()

        cart = CartReconciliationUseCase(gateway=gateway, store=store)
        refresh = AuthedDataRefreshUseCase(gateway=gateway, cart_use_case=cart)
        loyalty = LoyaltyUseCase(gateway=gateway)

        self._instances["cart_use_case"] = cart
        self._instances["merge_use_case"] = GuestCartMergeUseCase(
            gateway=gateway, store=store, cart_use_case=cart
        )
        self._instances["refresh_use_case"] = refresh
        self._instances["address_book_use_case"] = AddressBookUseCase(store=store)
        self._instances["loyalty_use_case"] = loyalty
        self._instances["order_placement_use_case"] = OrderPlacementUseCase(
            gateway=gateway,
            cart_use_case=cart,
            refresh_use_case=refresh,
            loyalty_use_case=loyalty,
            pickup_address=self._config.pickup_address,
        )
        self._instances["inventory_sync_use_case"] = InventorySyncUseCase(
            channel=self._instances["realtime_channel"], cart_use_case=cart
        )
        self._logger.debug("Use cases registered successfully")

    def get_gateway(self) -> CommerceGateway:
        return self._instances["gateway"]

    def get_store(self) -> KeyValueStore:
        return self._instances["store"]

    def get_cart_use_case(self) -> CartReconciliationUseCase:
        return self._instances["cart_use_case"]

    def get_order_placement_use_case(self) -> OrderPlacementUseCase:
        return self._instances["order_placement_use_case"]

    def get_session_controller(self) -> SessionController:
        """Get the session controller, created on first use"""
        if "session_controller" not in self._instances:
            self._instances["session_controller"] = SessionController(
                gateway=self.get_gateway(),
                store=self.get_store(),
                cart_use_case=self._instances["cart_use_case"],
                merge_use_case=self._instances["merge_use_case"],
                refresh_use_case=self._instances["refresh_use_case"],
                address_book_use_case=self._instances["address_book_use_case"],
                loyalty_use_case=self._instances["loyalty_use_case"],
                order_placement_use_case=self._instances["order_placement_use_case"],
                inventory_sync_use_case=self._instances["inventory_sync_use_case"],
            )
        return self._instances["session_controller"]

    async def close(self) -> None:
        """Release the HTTP client and database connections"""
        gateway = self._instances.get("gateway")
        if isinstance(gateway, HttpCommerceGateway):
            await gateway.close()
        db_manager = self._instances.get("db_manager")
        if db_manager is not None:
            db_manager.close()
        self._logger.info("Dependency container closed")
