"""
Domain Layer Tests
"""

from decimal import Decimal

import pytest

from goagri_client.domain.entities.address_book import AddressBook
from goagri_client.domain.entities.cart_entity import Cart, CartLine
from goagri_client.domain.entities.loyalty_entity import AppliedReward, LoyaltyState
from goagri_client.domain.entities.order_entity import Delivery, Order
from goagri_client.domain.entities.product_entity import Product
from goagri_client.domain.entities.user_profile import UserProfile
from goagri_client.domain.repositories.commerce_gateway import OrderPayload
from goagri_client.domain.value_objects.delivery_address import DeliveryAddress
from goagri_client.domain.value_objects.delivery_type import DeliveryType
from goagri_client.domain.value_objects.money import ZERO, to_amount
from goagri_client.domain.value_objects.payment_method import PaymentMethod
from goagri_client.domain.value_objects.product_id import ProductId
from goagri_client.domain.value_objects.session_identity import GUEST_KEY, SessionIdentity

from conftest import make_line


class TestValueObjects:
    """Test domain value objects"""

    def test_to_amount_rounds_half_up(self):
        assert to_amount("10.005") == Decimal("10.01")
        assert to_amount(0.1) == Decimal("0.10")
        assert to_amount(None) == ZERO

    def test_to_amount_rejects_garbage(self):
        with pytest.raises(ValueError):
            to_amount("ten")
        with pytest.raises(ValueError):
            to_amount(Decimal("NaN"))

    def test_product_id_is_trimmed(self):
        assert ProductId("  abc ").value == "abc"
        with pytest.raises(ValueError):
            ProductId("   ")

    def test_delivery_address_validation(self):
        assert DeliveryAddress("  12 Main St  ").value == "12 Main St"
        with pytest.raises(ValueError):
            DeliveryAddress("")
        with pytest.raises(ValueError):
            DeliveryAddress("x" * 501)

    def test_delivery_type_parse(self):
        assert DeliveryType.parse("Pickup") is DeliveryType.PICKUP
        assert DeliveryType.parse("third-party").requires_address
        assert not DeliveryType.PICKUP.requires_address
        with pytest.raises(ValueError, match="expected one of"):
            DeliveryType.parse("drone")

    def test_payment_method_external(self):
        assert PaymentMethod("E-Payment").is_external
        assert not PaymentMethod.COD.is_external

    def test_session_identity(self):
        guest = SessionIdentity.guest()
        user = SessionIdentity.authenticated("u1")
        assert not guest.is_authenticated
        assert guest.storage_key == GUEST_KEY
        assert user.storage_key == "u1"
        assert str(user) == "authenticated(u1)"
        with pytest.raises(ValueError):
            SessionIdentity.authenticated("  ")


class TestCart:
    """Test cart entity invariants"""

    def test_line_rejects_zero_quantity(self):
        with pytest.raises(ValueError):
            make_line(quantity=0)

    def test_line_rejects_negative_price(self):
        with pytest.raises(ValueError):
            make_line(price="-1")

    def test_duplicate_lines_are_collapsed(self):
        cart = Cart(lines=[make_line(quantity=1), make_line(quantity=2)])
        assert len(cart.lines) == 1
        assert cart.quantity_of("p1") == 3

    def test_set_line_quantity_zero_removes(self):
        cart = Cart(lines=[make_line(quantity=2)])
        assert cart.set_line_quantity("p1", 0)
        assert cart.is_empty

    def test_set_line_quantity_missing_line(self):
        assert not Cart().set_line_quantity("nope", 3)

    def test_subtotal_and_count(self):
        cart = Cart(
            lines=[make_line(quantity=2), make_line("p2", price="12.50", quantity=3)]
        )
        assert cart.subtotal == Decimal("237.50")
        assert cart.item_count == 5

    def test_line_dict_round_trip(self):
        line = CartLine.from_dict(
            {"productId": "p9", "name": "Hoe", "price": 75.5, "imageUrl": "hoe.png", "quantity": 2}
        )
        assert line.to_dict() == {
            "productId": "p9",
            "name": "Hoe",
            "price": 75.5,
            "imageUrl": "hoe.png",
            "quantity": 2,
        }

    def test_line_from_product(self):
        product = Product(id="p3", name="Fertilizer", price="250", stock=4, image_ref="f.png")
        line = CartLine.from_product(product)
        assert line.quantity == 1
        assert line.image_ref == "f.png"


class TestAddressBook:
    """Test the address book entity"""

    def test_add_is_deduplicated(self):
        book = AddressBook()
        assert book.add("Farm 1")
        assert not book.add("Farm 1")
        assert book.addresses == ["Farm 1"]

    def test_removing_default_clears_it(self):
        book = AddressBook(addresses=["A", "B"], default="A")
        assert book.remove("A")
        assert book.default is None
        assert book.first == "B"


class TestLoyaltyAndOrders:
    """Test loyalty entities, orders and payloads"""

    def test_loyalty_percentage_bounds(self):
        with pytest.raises(ValueError):
            LoyaltyState(discount_percentage=Decimal("101"))
        with pytest.raises(ValueError):
            LoyaltyState(points=-1)

    def test_applied_reward_validation(self):
        with pytest.raises(ValueError):
            AppliedReward(name="")
        with pytest.raises(ValueError):
            AppliedReward(name="Promo", discount_amount=Decimal("-5"))

    def test_order_with_delivery(self):
        order = Order(
            id="o1",
            items=(make_line(),),
            total=Decimal("150"),
            delivery_fee=Decimal("50"),
            address="Farm 1",
            delivery_type="in-house",
            payment_method="COD",
        )
        delivery = Delivery(id="d1", order_id="o1", status="assigned")
        assert order.with_delivery(delivery).delivery == delivery
        assert order.delivery is None

    def test_order_payload_body(self):
        payload = OrderPayload(
            items=(make_line(quantity=2),),
            total=Decimal("250"),
            delivery_fee=Decimal("50"),
            address="Farm 1",
            delivery_type="in-house",
            payment_method="COD",
            loyalty_reward=AppliedReward(name="Free Delivery", free_shipping=True),
            extra={"userId": "u1"},
        )
        body = payload.to_dict()
        assert body["total"] == 250.0
        assert body["deliveryFee"] == 50.0
        assert body["loyaltyReward"] == {
            "name": "Free Delivery",
            "discount": 0.0,
            "freeShipping": True,
        }
        assert body["userId"] == "u1"

    def test_user_profile_key_resolution(self):
        assert UserProfile.from_dict({"_id": "a", "id": "b"}).user_id == "a"
        assert UserProfile.from_dict({"id": "b", "email": "c@x"}).user_id == "b"
        assert UserProfile.from_dict({"email": "c@x"}).user_id == "c@x"
        with pytest.raises(ValueError):
            UserProfile.from_dict({"name": "nobody"})

    def test_user_profile_display_name(self):
        assert UserProfile("u", name="Ana").display_name == "Ana"
        assert UserProfile("u", email="a@x").display_name == "a@x"
