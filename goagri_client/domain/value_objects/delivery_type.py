"""Delivery type value object"""

from enum import Enum


class DeliveryType(str, Enum):
    """How an order reaches the shopper"""

    PICKUP = "pickup"
    IN_HOUSE = "in-house"
    THIRD_PARTY = "third-party"

    @classmethod
    def parse(cls, value) -> "DeliveryType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            allowed = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Invalid delivery type {value!r}; expected one of: {allowed}"
            ) from exc

    @property
    def requires_address(self) -> bool:
        return self is not DeliveryType.PICKUP
