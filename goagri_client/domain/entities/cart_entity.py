"""
Cart Entity

A cart is an ordered list of lines, at most one per product id, none with a
quantity below one.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from goagri_client.domain.entities.product_entity import Product
from goagri_client.domain.value_objects.money import ZERO, to_amount
from goagri_client.domain.value_objects.product_id import ProductId
from goagri_client.domain.value_objects.session_identity import GUEST_KEY


@dataclass(frozen=True)
class CartLine:
    """One product in the cart"""

    product_id: str
    name: str
    price: Decimal
    image_ref: str = ""
    quantity: int = 1

    def __post_init__(self):
        object.__setattr__(self, "product_id", ProductId(self.product_id).value)
        object.__setattr__(self, "price", to_amount(self.price))
        if self.price < 0:
            raise ValueError("Cart line price cannot be negative")
        if isinstance(self.quantity, bool) or int(self.quantity) != self.quantity:
            raise ValueError("Cart line quantity must be an integer")
        object.__setattr__(self, "quantity", int(self.quantity))
        if self.quantity < 1:
            raise ValueError("Cart line quantity must be at least 1")

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> "CartLine":
        return cls(
            product_id=product.id,
            name=product.name,
            price=product.price,
            image_ref=product.image_ref,
            quantity=quantity,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartLine":
        """Build a line from its stored (camelCase) form"""
        return cls(
            product_id=data["productId"],
            name=data.get("name") or "",
            price=to_amount(data.get("price")),
            image_ref=data.get("imageUrl") or "",
            quantity=int(data.get("quantity", 1)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "name": self.name,
            "price": float(self.price),
            "imageUrl": self.image_ref,
            "quantity": self.quantity,
        }

    def with_quantity(self, quantity: int) -> "CartLine":
        return replace(self, quantity=quantity)

    @property
    def line_total(self) -> Decimal:
        return to_amount(self.price * self.quantity)


@dataclass
class Cart:
    """The active cart of a session, keyed by owner ("guest" or user id)"""

    owner: str = GUEST_KEY
    lines: List[CartLine] = field(default_factory=list)

    def __post_init__(self):
        self.lines = self._normalize(self.lines)

    @staticmethod
    def _normalize(lines: Iterable[CartLine]) -> List[CartLine]:
        # Collapse duplicate product ids, keeping first-seen order and details
        by_id: Dict[str, CartLine] = {}
        for line in lines:
            existing = by_id.get(line.product_id)
            if existing is None:
                by_id[line.product_id] = line
            else:
                by_id[line.product_id] = existing.with_quantity(
                    existing.quantity + line.quantity
                )
        return list(by_id.values())

    def find(self, product_id: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def quantity_of(self, product_id: str) -> int:
        line = self.find(product_id)
        return line.quantity if line else 0

    def upsert(self, line: CartLine) -> None:
        """Replace the line for line.product_id in place, or append it"""
        for index, existing in enumerate(self.lines):
            if existing.product_id == line.product_id:
                self.lines[index] = line
                return
        self.lines.append(line)

    def set_line_quantity(self, product_id: str, quantity: int) -> bool:
        """Set quantity on an existing line; zero or less removes it"""
        line = self.find(product_id)
        if line is None:
            return False
        if quantity <= 0:
            return self.remove(product_id)
        self.upsert(line.with_quantity(quantity))
        return True

    def remove(self, product_id: str) -> bool:
        before = len(self.lines)
        self.lines = [line for line in self.lines if line.product_id != product_id]
        return len(self.lines) != before

    def replace_lines(self, lines: Iterable[CartLine]) -> None:
        self.lines = self._normalize(lines)

    def clear(self) -> None:
        self.lines = []

    def snapshot(self) -> Tuple[CartLine, ...]:
        return tuple(self.lines)

    def to_payload(self) -> List[Dict[str, Any]]:
        return [line.to_dict() for line in self.lines]

    @property
    def subtotal(self) -> Decimal:
        return to_amount(sum((line.line_total for line in self.lines), ZERO))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines
