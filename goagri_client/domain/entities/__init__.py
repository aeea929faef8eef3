"""
Domain entities package

Contains the core shopping entities of the GoAgri client: cart lines,
orders, loyalty state and the per-user address book.
"""

from .address_book import AddressBook
from .cart_entity import Cart, CartLine
from .loyalty_entity import AppliedReward, LoyaltyState, Redemption, Reward
from .order_entity import Delivery, Order
from .product_entity import Product
from .user_profile import UserProfile

__all__ = [
    "AddressBook",
    "AppliedReward",
    "Cart",
    "CartLine",
    "Delivery",
    "LoyaltyState",
    "Order",
    "Product",
    "Redemption",
    "Reward",
    "UserProfile",
]
