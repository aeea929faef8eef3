"""
Domain value objects package

Contains immutable value objects that represent concepts in the shopping domain.
"""

from .delivery_address import DeliveryAddress
from .delivery_type import DeliveryType
from .money import ZERO, to_amount
from .payment_method import PaymentMethod
from .product_id import ProductId
from .session_identity import SessionIdentity

__all__ = [
    "DeliveryAddress",
    "DeliveryType",
    "PaymentMethod",
    "ProductId",
    "SessionIdentity",
    "ZERO",
    "to_amount",
]
