"""
Custom exceptions for the GoAgri client engine
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class GoAgriClientError(Exception):
    """Base exception for the client engine"""

    def __init__(self, message: str, user_message: str = None, error_code: str = None):
        super().__init__(message)
        self.user_message = user_message or "An error occurred. Please try again."
        self.error_code = error_code or "GENERAL_ERROR"


class ValidationError(GoAgriClientError):
    """Input validation errors, rejected before any network call"""

    def __init__(self, message: str, field: str = None, error_code: str = None):
        super().__init__(
            message, message, error_code or "VALIDATION_ERROR"  # Validation errors are user-friendly
        )
        self.field = field


class AddressRequiredError(ValidationError):
    """Delivery address missing for a non-pickup order"""

    def __init__(self):
        super().__init__(
            "Delivery address is required", "address", "ADDRESS_REQUIRED"
        )


class InvalidRewardError(ValidationError):
    """Reward cannot be applied"""

    def __init__(self, reason: str):
        super().__init__(f"Invalid reward: {reason}", "reward", "INVALID_REWARD")


class BusinessLogicError(GoAgriClientError):
    """Business rule violations"""

    def __init__(self, message: str, user_message: str = None, error_code: str = None):
        super().__init__(message, user_message or message, error_code or "BUSINESS_ERROR")


class CartEmptyError(BusinessLogicError):
    """Cart is empty when operation requires items"""

    def __init__(self):
        super().__init__(
            "Cart is empty", "Your cart is empty.", "CART_EMPTY"
        )


class NotAuthenticatedError(BusinessLogicError):
    """Operation requires a logged-in user"""

    def __init__(self):
        super().__init__(
            "Not logged in",
            "You need to login or create an account to continue.",
            "NOT_AUTHENTICATED",
        )


class PlacementInProgressError(BusinessLogicError):
    """An order submission is already awaiting a response"""

    def __init__(self):
        super().__init__(
            "Order placement already in progress",
            "Your order is being placed. Please wait.",
            "PLACEMENT_IN_PROGRESS",
        )


class StockError(BusinessLogicError):
    """Base class for local stock checks"""


class OutOfStockError(StockError):
    """Product has no stock left"""

    def __init__(self, product_name: str):
        super().__init__(
            f"Product out of stock: {product_name}",
            f"Sorry, {product_name} is out of stock.",
            "OUT_OF_STOCK",
        )


class StockExceededError(StockError):
    """Requested quantity is above available stock"""

    def __init__(self, product_name: str, stock: int):
        super().__init__(
            f"Stock exceeded for {product_name}: only {stock} available",
            f"Only {stock} of {product_name} available.",
            "STOCK_EXCEEDED",
        )
        self.stock = stock


class GatewayError(GoAgriClientError):
    """Remote commerce gateway failure (4xx/5xx/network)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        # Gateway messages are surfaced verbatim to the shopper
        super().__init__(message, message, "GATEWAY_ERROR")
        self.status_code = status_code


class GatewayResponseError(GatewayError):
    """Gateway answered with a body that does not match the endpoint schema"""

    def __init__(self, operation: str, detail: str):
        super().__init__(f"Unexpected response from {operation}: {detail}")
        self.error_code = "GATEWAY_RESPONSE_ERROR"
        self.operation = operation


class AuthenticationError(GatewayError):
    """Login or registration rejected"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.error_code = "AUTHENTICATION_ERROR"


class StorageError(GoAgriClientError):
    """Local persistent store failure"""

    def __init__(self, message: str, operation: str = None):
        super().__init__(
            message,
            "Sorry, we could not save your data on this device.",
            "STORAGE_ERROR",
        )
        self.operation = operation


def validate_and_raise(condition: bool, error_class: type, *args, **kwargs):
    """Helper function to validate condition and raise specific error"""
    if not condition:
        raise error_class(*args, **kwargs)
