"""
HTTP commerce gateway

Concrete CommerceGateway over httpx. Every endpoint body is validated by
its schema from gateway.schemas; non-2xx answers raise GatewayError with
the server's message verbatim.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from goagri_client.domain.entities.cart_entity import CartLine
from goagri_client.domain.entities.loyalty_entity import (
    LoyaltyState,
    Redemption,
    Reward,
)
from goagri_client.domain.entities.order_entity import Delivery, Order
from goagri_client.domain.repositories.commerce_gateway import (
    AuthResult,
    CommerceGateway,
    OrderPayload,
)
from goagri_client.infrastructure.gateway.schemas import (
    AuthResponse,
    CartResponse,
    DeliveriesResponse,
    ErrorBody,
    ExternalPaymentResponse,
    LoyaltyStatusResponse,
    OrderCreatedResponse,
    OrderSchema,
    RedeemResponse,
    RedemptionHistoryResponse,
    RewardsResponse,
)
from goagri_client.infrastructure.logging.logging_config import PerformanceLogger
from goagri_client.infrastructure.utilities.exceptions import (
    AuthenticationError,
    GatewayError,
    GatewayResponseError,
)

SchemaT = TypeVar("SchemaT", bound=BaseModel)
ResultT = TypeVar("ResultT")


class HttpCommerceGateway(CommerceGateway):
    """httpx implementation of the commerce gateway"""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._logger = logging.getLogger(self.__class__.__name__)

    def set_auth_token(self, token: Optional[str]) -> None:
        if token:
            self._client.headers["Authorization"] = f"Bearer {token}"
        else:
            self._client.headers.pop("Authorization", None)

    @property
    def has_auth_token(self) -> bool:
        return "Authorization" in self._client.headers

    async def close(self) -> None:
        await self._client.aclose()

    # Auth

    async def login(self, email: str, password: str) -> AuthResult:
        return await self._authenticate(
            "login", "auth/login", {"email": email, "password": password}
        )

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        return await self._authenticate(
            "register",
            "auth/register",
            {"name": name, "email": email, "password": password},
        )

    async def _authenticate(
        self, operation: str, path: str, body: Dict[str, Any]
    ) -> AuthResult:
        try:
            data = await self._request(operation, "POST", path, json=body)
        except GatewayResponseError:
            raise
        except GatewayError as e:
            raise AuthenticationError(str(e), e.status_code) from e
        parsed = self._parse(operation, AuthResponse, data)
        return AuthResult(
            token=parsed.token,
            user=self._convert(operation, parsed.to_profile),
        )

    # Cart

    async def fetch_cart(self, user_id: str) -> List[CartLine]:
        data = await self._request("fetch_cart", "GET", f"cart/{user_id}", allow_404=True)
        if data is None:
            return []
        parsed = self._parse("fetch_cart", CartResponse, data)
        return self._convert("fetch_cart", parsed.to_entities)

    async def save_cart(self, user_id: str, items: Sequence[CartLine]) -> None:
        await self._request(
            "save_cart",
            "POST",
            "cart",
            json={"userId": user_id, "items": [line.to_dict() for line in items]},
        )

    # Orders and deliveries

    async def fetch_orders(self, user_id: str) -> List[Order]:
        data = await self._request("fetch_orders", "GET", f"orders/{user_id}")
        if not isinstance(data, list):
            raise GatewayResponseError("fetch_orders", "expected a list of orders")
        orders = [self._parse("fetch_orders", OrderSchema, raw) for raw in data]
        return [self._convert("fetch_orders", order.to_entity) for order in orders]

    async def create_cod_order(self, payload: OrderPayload) -> Order:
        data = await self._request(
            "create_cod_order", "POST", "orders", json=payload.to_dict()
        )
        parsed = self._parse("create_cod_order", OrderCreatedResponse, data)
        return self._convert("create_cod_order", parsed.order.to_entity)

    async def create_external_payment_order(self, payload: OrderPayload) -> str:
        data = await self._request(
            "create_external_payment_order",
            "POST",
            "orders/epayment",
            json=payload.to_dict(),
        )
        parsed = self._parse(
            "create_external_payment_order", ExternalPaymentResponse, data
        )
        return parsed.payment.checkout_url

    async def list_my_deliveries(self) -> List[Delivery]:
        data = await self._request("list_my_deliveries", "GET", "delivery/mine")
        parsed = self._parse("list_my_deliveries", DeliveriesResponse, data)
        return self._convert("list_my_deliveries", parsed.to_entities)

    # Loyalty

    async def get_loyalty_status(self) -> LoyaltyState:
        data = await self._request("get_loyalty_status", "GET", "loyalty/status")
        parsed = self._parse("get_loyalty_status", LoyaltyStatusResponse, data)
        return self._convert("get_loyalty_status", parsed.loyalty.to_entity)

    async def issue_loyalty_card(self) -> None:
        await self._request("issue_loyalty_card", "POST", "loyalty/issue-card")

    async def get_available_rewards(self) -> List[Reward]:
        data = await self._request("get_available_rewards", "GET", "loyalty/rewards")
        parsed = self._parse("get_available_rewards", RewardsResponse, data)
        return [reward.to_entity() for reward in parsed.rewards]

    async def redeem_reward(self, name: str) -> Redemption:
        data = await self._request(
            "redeem_reward", "POST", "loyalty/redeem", json={"name": name}
        )
        parsed = self._parse("redeem_reward", RedeemResponse, data)
        return parsed.redemption.to_entity()

    async def get_redemption_history(self) -> List[Redemption]:
        data = await self._request(
            "get_redemption_history", "GET", "loyalty/redemptions"
        )
        parsed = self._parse("get_redemption_history", RedemptionHistoryResponse, data)
        return [redemption.to_entity() for redemption in parsed.redemptions]

    # Transport

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        allow_404: bool = False,
    ) -> Any:
        try:
            with PerformanceLogger(f"gateway.{operation}", self._logger):
                response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            self._logger.error("💥 GATEWAY %s unreachable: %s", operation, e)
            raise GatewayError(f"{operation} failed: {e}") from e

        if allow_404 and response.status_code == 404:
            return None
        if response.is_error:
            message = self._error_message(operation, response)
            self._logger.warning(
                "GATEWAY %s returned %s: %s", operation, response.status_code, message
            )
            raise GatewayError(message, response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GatewayResponseError(operation, "body is not JSON") from e

    @staticmethod
    def _error_message(operation: str, response: httpx.Response) -> str:
        fallback = f"{operation} failed with {response.status_code}"
        try:
            body = ErrorBody.model_validate(response.json())
        except (ValueError, PydanticValidationError):
            return fallback
        if isinstance(body.message, str) and body.message.strip():
            return body.message
        return fallback

    def _parse(self, operation: str, schema: Type[SchemaT], data: Any) -> SchemaT:
        try:
            return schema.model_validate(data)
        except PydanticValidationError as e:
            self._logger.error("💥 GATEWAY %s response mismatch: %s", operation, e)
            raise GatewayResponseError(operation, str(e)) from e

    def _convert(self, operation: str, build: Callable[[], ResultT]) -> ResultT:
        """Run an entity conversion; domain validation failures are response errors"""
        try:
            return build()
        except (PydanticValidationError, ValueError) as e:
            self._logger.error("💥 GATEWAY %s returned invalid data: %s", operation, e)
            raise GatewayResponseError(operation, str(e)) from e
