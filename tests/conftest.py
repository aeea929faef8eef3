"""
Test configuration and fixtures for the GoAgri client engine
"""

import os
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

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
from goagri_client.application.use_cases.loyalty_use_case import LoyaltyUseCase
from goagri_client.application.use_cases.order_placement_use_case import (
    OrderPlacementUseCase,
)
from goagri_client.domain.entities.cart_entity import CartLine
from goagri_client.domain.entities.loyalty_entity import LoyaltyState
from goagri_client.domain.entities.product_entity import Product
from goagri_client.domain.entities.user_profile import UserProfile
from goagri_client.domain.repositories.commerce_gateway import CommerceGateway
from goagri_client.domain.value_objects.session_identity import SessionIdentity
from goagri_client.infrastructure.configuration.config import reset_config
from goagri_client.infrastructure.persistence.database import StoreDatabaseManager
from goagri_client.infrastructure.persistence.sqlalchemy_key_value_store import (
    SQLAlchemyKeyValueStore,
)

PICKUP_ADDRESS = "Poblacion 1, Moncada\nTarlac, Philippines"


@pytest.fixture(autouse=True)
def mock_env():
    """Isolate every test from the host environment and cached settings"""
    test_env = {
        "API_URL": "http://gateway.test/api",
        "STORE_URL": "sqlite://",
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, test_env, clear=True):
        reset_config()
        yield test_env
    reset_config()


@pytest.fixture
def db_manager():
    """In-memory SQLite store database"""
    manager = StoreDatabaseManager(store_url="sqlite://")
    manager.create_tables()
    yield manager
    manager.close()


@pytest.fixture
def store(db_manager):
    return SQLAlchemyKeyValueStore(db_manager)


def make_gateway() -> MagicMock:
    """Gateway double answering every read with an empty result"""
    gateway = MagicMock(spec=CommerceGateway)
    gateway.set_auth_token = MagicMock()
    gateway.login = AsyncMock()
    gateway.register = AsyncMock()
    gateway.fetch_cart = AsyncMock(return_value=[])
    gateway.save_cart = AsyncMock(return_value=None)
    gateway.fetch_orders = AsyncMock(return_value=[])
    gateway.create_cod_order = AsyncMock()
    gateway.create_external_payment_order = AsyncMock()
    gateway.list_my_deliveries = AsyncMock(return_value=[])
    gateway.get_loyalty_status = AsyncMock(return_value=LoyaltyState())
    gateway.issue_loyalty_card = AsyncMock(return_value=None)
    gateway.get_available_rewards = AsyncMock(return_value=[])
    gateway.redeem_reward = AsyncMock()
    gateway.get_redemption_history = AsyncMock(return_value=[])
    return gateway


@pytest.fixture
def gateway():
    return make_gateway()


@pytest.fixture
def guest_state():
    return SessionState()


@pytest.fixture
def authed_state():
    state = SessionState()
    state.token = "token-123"
    state.switch_identity(
        SessionIdentity.authenticated("user-1"),
        UserProfile(user_id="user-1", name="Ana", email="ana@example.com"),
    )
    return state


@pytest.fixture
def cart_use_case(gateway, store):
    return CartReconciliationUseCase(gateway=gateway, store=store)


@pytest.fixture
def refresh_use_case(gateway, cart_use_case):
    return AuthedDataRefreshUseCase(gateway=gateway, cart_use_case=cart_use_case)


@pytest.fixture
def loyalty_use_case(gateway):
    return LoyaltyUseCase(gateway=gateway)


@pytest.fixture
def address_book_use_case(store):
    return AddressBookUseCase(store=store)


@pytest.fixture
def order_placement_use_case(gateway, cart_use_case, refresh_use_case, loyalty_use_case):
    return OrderPlacementUseCase(
        gateway=gateway,
        cart_use_case=cart_use_case,
        refresh_use_case=refresh_use_case,
        loyalty_use_case=loyalty_use_case,
        pickup_address=PICKUP_ADDRESS,
    )


def make_product(product_id="p1", name="Rice seeds", price="100", stock=10) -> Product:
    return Product(id=product_id, name=name, price=Decimal(price), stock=stock)


def make_line(product_id="p1", name="Rice seeds", price="100", quantity=1) -> CartLine:
    return CartLine(
        product_id=product_id, name=name, price=Decimal(price), quantity=quantity
    )
