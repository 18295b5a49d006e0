"""Domain package."""

from .cart import CartItem, Product, calc_item_count, calc_total_price, discounted_price
from .checkout_fsm import CheckoutState, MutationState, OverlayState

__all__ = [
    # Entities
    "CartItem",
    "Product",
    # Price helpers
    "calc_item_count",
    "calc_total_price",
    "discounted_price",
    # States
    "CheckoutState",
    "MutationState",
    "OverlayState",
]
