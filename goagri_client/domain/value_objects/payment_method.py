"""Payment method value object"""

from enum import Enum


class PaymentMethod(str, Enum):
    """Order completion path"""

    COD = "COD"
    E_PAYMENT = "E-Payment"

    @property
    def is_external(self) -> bool:
        return self is PaymentMethod.E_PAYMENT
