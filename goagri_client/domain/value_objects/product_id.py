"""Product ID value object"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProductId:
    """Catalogue product identifier (backend object id)"""

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("Product ID must be a non-empty string")
        object.__setattr__(self, "value", self.value.strip())

    def __str__(self) -> str:
        return self.value
