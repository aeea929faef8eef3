"""
Product Entity - catalogue data the cart checks stock against
"""

from dataclasses import dataclass
from decimal import Decimal

from goagri_client.domain.value_objects.money import to_amount
from goagri_client.domain.value_objects.product_id import ProductId


@dataclass(frozen=True)
class Product:
    """Last-known catalogue product"""

    id: str
    name: str
    price: Decimal
    stock: int = 0
    image_ref: str = ""
    category: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "id", ProductId(self.id).value)
        object.__setattr__(self, "price", to_amount(self.price))
        if self.price < 0:
            raise ValueError("Product price cannot be negative")
        object.__setattr__(self, "stock", int(self.stock or 0))

    @property
    def in_stock(self) -> bool:
        return self.stock > 0
