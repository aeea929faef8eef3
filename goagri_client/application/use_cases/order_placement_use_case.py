"""
Order placement use case

Drives checkout through Validating and one of two submission paths:
cash on delivery completes synchronously, external payment hands back a
checkout URL and waits for confirmation. Cart, delivery address and reward
stack are cleared only once completion is confirmed.
"""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional

from goagri_client.application.dtos.order_dtos import (
    OrderPlacementResponse,
    PayableBreakdown,
    PlaceOrderRequest,
    PlacementState,
)
from goagri_client.application.dtos.session_dtos import (
    ExternalPaymentPending,
    OrderCompleted,
)
from goagri_client.application.session_state import SessionState
from goagri_client.application.use_cases.authed_refresh_use_case import (
    AuthedDataRefreshUseCase,
)
from goagri_client.application.use_cases.cart_reconciliation_use_case import (
    CartReconciliationUseCase,
)
from goagri_client.application.use_cases.loyalty_use_case import LoyaltyUseCase
from goagri_client.domain.entities.order_entity import Order
from goagri_client.domain.repositories.commerce_gateway import (
    CommerceGateway,
    OrderPayload,
)
from goagri_client.domain.value_objects.delivery_address import DeliveryAddress
from goagri_client.domain.value_objects.delivery_type import DeliveryType
from goagri_client.domain.value_objects.money import ZERO, to_amount
from goagri_client.domain.value_objects.payment_method import PaymentMethod
from goagri_client.infrastructure.utilities.constants import BusinessSettings
from goagri_client.infrastructure.utilities.exceptions import (
    AddressRequiredError,
    BusinessLogicError,
    CartEmptyError,
    GoAgriClientError,
    NotAuthenticatedError,
    PlacementInProgressError,
    ValidationError,
)


def delivery_fee_for(delivery_type: DeliveryType) -> Decimal:
    """Fee table: pickup 0, in-house 50, third-party 80"""
    return to_amount(BusinessSettings.DELIVERY_FEES[delivery_type.value])


@dataclass
class _ValidatedOrder:
    payload: OrderPayload
    breakdown: PayableBreakdown
    payment_method: PaymentMethod


class OrderPlacementUseCase:
    """
    Use case for placing orders

    Handles:
    1. Validating delivery inputs and computing fees and totals
    2. Submitting cash-on-delivery orders
    3. Starting, confirming and cancelling external payments
    """

    def __init__(
        self,
        gateway: CommerceGateway,
        cart_use_case: CartReconciliationUseCase,
        refresh_use_case: AuthedDataRefreshUseCase,
        loyalty_use_case: LoyaltyUseCase,
        pickup_address: str,
    ):
        self._gateway = gateway
        self._cart_use_case = cart_use_case
        self._refresh_use_case = refresh_use_case
        self._loyalty_use_case = loyalty_use_case
        self._pickup_address = pickup_address
        self._logger = logging.getLogger(self.__class__.__name__)

    def preview_totals(
        self,
        state: SessionState,
        delivery_type=BusinessSettings.DEFAULT_DELIVERY_TYPE,
        delivery_fee_override: Optional[Decimal] = None,
    ) -> PayableBreakdown:
        """What placement would charge right now, without submitting"""
        parsed = self._parse_delivery_type(delivery_type)
        fee = self._resolve_fee(state, parsed, delivery_fee_override)
        return state.reward_stack.breakdown(state.cart.subtotal, fee)

    async def place(
        self, state: SessionState, request: PlaceOrderRequest
    ) -> OrderPlacementResponse:
        """Place the current cart; a second call while one is in flight is rejected"""
        if state.placement_state.in_flight:
            raise PlacementInProgressError()

        generation = state.generation
        state.placement_state = PlacementState.VALIDATING
        state.pending_checkout_url = None
        self._logger.info(
            "📝 ORDER PLACEMENT STARTED for %s (%s, %s)",
            state.identity,
            request.delivery_type,
            request.payment_method,
        )

        try:
            try:
                validated = self._validate(state, request)
            except GoAgriClientError as e:
                self._logger.warning("💥 ORDER VALIDATION FAILED: %s", e)
                return self._fail(state, e)

            if validated.payment_method.is_external:
                return await self._submit_external(state, generation, validated)
            return await self._submit_cod(state, generation, validated)
        except BaseException as e:
            # Cancelled or unexpected failure: never leave the session in flight
            if state.is_current(generation) and state.placement_state.in_flight:
                state.placement_state = PlacementState.FAILED
            self._logger.error("💥 ORDER SUBMISSION ABORTED: %r", e)
            raise

    async def confirm_external_payment(self, state: SessionState) -> OrderPlacementResponse:
        """The hosted payment succeeded; apply the completion rule"""
        if state.placement_state is not PlacementState.PENDING_EXTERNAL_PAYMENT:
            raise BusinessLogicError(
                "No external payment is awaiting confirmation",
                error_code="NO_PENDING_PAYMENT",
            )
        self._logger.info("💳 External payment confirmed for %s", state.identity)
        await self._complete(state, None)
        return OrderPlacementResponse(success=True, state=state.placement_state)

    def cancel_external_payment(self, state: SessionState) -> bool:
        """Abandon a pending external payment; the cart is kept"""
        if state.placement_state is not PlacementState.PENDING_EXTERNAL_PAYMENT:
            return False
        state.placement_state = PlacementState.IDLE
        state.pending_checkout_url = None
        self._logger.info("💳 External payment cancelled for %s", state.identity)
        return True

    def _validate(self, state: SessionState, request: PlaceOrderRequest) -> _ValidatedOrder:
        if not state.identity.is_authenticated:
            raise NotAuthenticatedError()
        if state.cart.is_empty or state.cart.subtotal <= ZERO:
            raise CartEmptyError()

        delivery_type = self._parse_delivery_type(request.delivery_type)
        try:
            payment_method = PaymentMethod(request.payment_method)
        except ValueError as e:
            raise ValidationError(
                f"Invalid payment method {request.payment_method!r}", "payment_method"
            ) from e

        if delivery_type.requires_address:
            if not (state.delivery_address or "").strip():
                raise AddressRequiredError()
            try:
                address = DeliveryAddress(state.delivery_address).value
            except ValueError as e:
                raise ValidationError(str(e), "address") from e
        else:
            address = self._pickup_address

        fee = self._resolve_fee(state, delivery_type, request.delivery_fee_override)
        breakdown = state.reward_stack.breakdown(state.cart.subtotal, fee)
        override = self._total_override(request.total_override)
        if override is not None:
            breakdown = replace(breakdown, total=override)

        payload = OrderPayload(
            items=state.cart.snapshot(),
            total=breakdown.total,
            delivery_fee=breakdown.delivery_fee,
            address=address,
            delivery_type=delivery_type.value,
            payment_method=payment_method.value,
            loyalty_reward=state.reward_stack.applied_reward,
            extra={"userId": state.identity.user_id},
        )
        return _ValidatedOrder(payload=payload, breakdown=breakdown, payment_method=payment_method)

    def _resolve_fee(
        self,
        state: SessionState,
        delivery_type: DeliveryType,
        override: Optional[Decimal],
    ) -> Decimal:
        if override is not None:
            return self._amount(override, "delivery_fee")
        if state.reward_stack.free_shipping:
            return ZERO
        return delivery_fee_for(delivery_type)

    @staticmethod
    def _parse_delivery_type(value) -> DeliveryType:
        try:
            return DeliveryType.parse(value)
        except ValueError as e:
            raise ValidationError(str(e), "delivery_type") from e

    @staticmethod
    def _total_override(value) -> Optional[Decimal]:
        """A positive override replaces the computed total; anything else is ignored"""
        if value is None:
            return None
        try:
            override = to_amount(value)
        except ValueError as e:
            raise ValidationError(str(e), "total") from e
        return override if override > ZERO else None

    @staticmethod
    def _amount(value, field: str) -> Decimal:
        try:
            amount = to_amount(value)
        except ValueError as e:
            raise ValidationError(str(e), field) from e
        if amount < ZERO:
            raise ValidationError(f"{field} cannot be negative", field)
        return amount

    async def _submit_cod(
        self, state: SessionState, generation: int, validated: _ValidatedOrder
    ) -> OrderPlacementResponse:
        state.placement_state = PlacementState.COD_SUBMITTING
        try:
            order = await self._gateway.create_cod_order(validated.payload)
        except GoAgriClientError as e:
            self._logger.error("💥 COD ORDER FAILED: %s", e)
            return self._fail(state, e, generation, validated.breakdown)

        if not state.is_current(generation):
            self._logger.warning("Session changed while order %s was submitted", order.id)
            return OrderPlacementResponse(
                success=True,
                state=PlacementState.COMPLETED,
                order=order,
                breakdown=validated.breakdown,
            )

        await self._complete(state, order)
        self._logger.info("🎉 ORDER %s COMPLETED (total %s)", order.id, order.total)
        return OrderPlacementResponse(
            success=True,
            state=state.placement_state,
            order=order,
            breakdown=validated.breakdown,
        )

    async def _submit_external(
        self, state: SessionState, generation: int, validated: _ValidatedOrder
    ) -> OrderPlacementResponse:
        state.placement_state = PlacementState.PAYMENT_REDIRECTING
        try:
            checkout_url = await self._gateway.create_external_payment_order(
                validated.payload
            )
        except GoAgriClientError as e:
            self._logger.error("💥 EXTERNAL PAYMENT FAILED: %s", e)
            return self._fail(state, e, generation, validated.breakdown)

        if state.is_current(generation):
            state.placement_state = PlacementState.PENDING_EXTERNAL_PAYMENT
            state.pending_checkout_url = checkout_url
            state.emit(ExternalPaymentPending(checkout_url=checkout_url))
        self._logger.info("💳 Awaiting external payment for %s", state.identity)
        return OrderPlacementResponse(
            success=True,
            state=PlacementState.PENDING_EXTERNAL_PAYMENT,
            checkout_url=checkout_url,
            breakdown=validated.breakdown,
        )

    async def _complete(self, state: SessionState, order: Optional[Order]) -> None:
        """Single completion rule shared by both payment paths"""
        if order is not None:
            state.orders.insert(0, order)
        await self._cart_use_case.clear(state)
        state.delivery_address = ""
        state.reward_stack.reset()
        state.pending_checkout_url = None
        state.placement_state = PlacementState.COMPLETED
        state.emit(OrderCompleted(order_id=order.id if order else None))

        generation = state.generation
        await self._refresh_use_case.execute(state)
        if not state.is_current(generation):
            return
        if order is not None and all(o.id != order.id for o in state.orders):
            state.orders.insert(0, order)
        await self._loyalty_use_case.refresh(state)

    def _fail(
        self,
        state: SessionState,
        error: GoAgriClientError,
        generation: Optional[int] = None,
        breakdown: Optional[PayableBreakdown] = None,
    ) -> OrderPlacementResponse:
        if generation is None or state.is_current(generation):
            state.placement_state = PlacementState.FAILED
        return OrderPlacementResponse(
            success=False,
            state=PlacementState.FAILED,
            breakdown=breakdown,
            error_message=error.user_message,
            error_code=error.error_code,
        )
