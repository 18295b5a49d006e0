"""Cart domain types and price helpers."""
from __future__ import annotations

import math
import random
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from app.core.constants import MAX_CATEGORY_DISCOUNT, MIN_CATEGORY_DISCOUNT, MIN_QUANTITY
from app.core.exceptions import ValidationException
from logging_config import logger


@dataclass(frozen=True, slots=True)
class Product:
    """Catalog product as delivered by the catalog API."""

    id: int
    title: str
    price: float
    category: str
    image: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Product:
        return cls(
            id=int(data.get("id", 0)),
            title=str(data.get("title") or data.get("name") or ""),
            price=float(data.get("price") or 0),
            category=str(data.get("category", "")),
            image=str(data.get("image", "")),
            description=str(data.get("description", "")),
        )


@dataclass(slots=True)
class CartItem:
    """Single line in the cart, keyed by server id and by unique name."""

    id: str
    name: str
    image: str
    category: str
    description: str
    quantity: int
    original_price: float
    discount_price: float

    @property
    def line_total(self) -> float:
        return self.discount_price * self.quantity

    @classmethod
    def from_product(cls, product: Product, discount_price: float) -> CartItem:
        """Build a new cart line; the discount is fixed at this moment."""
        original_price = float(product.price)
        discount_price = float(discount_price)
        if original_price < 0:
            raise ValidationException(f"Price of '{product.title}' must not be negative")
        if not 0 <= discount_price <= original_price:
            raise ValidationException(
                f"Discount price {discount_price} of '{product.title}' must be within "
                f"0..{original_price}"
            )
        if not product.title:
            raise ValidationException("Product title is required")
        return cls(
            id="",
            name=product.title,
            image=product.image,
            category=product.category,
            description=product.description,
            quantity=MIN_QUANTITY,
            original_price=original_price,
            discount_price=discount_price,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartItem:
        """Parse a Cart Service payload, coercing values back into range."""
        name = str(data.get("name", ""))
        try:
            quantity = int(data.get("quantity") or MIN_QUANTITY)
        except (TypeError, ValueError, OverflowError):
            quantity = MIN_QUANTITY
        if quantity < MIN_QUANTITY:
            logger.warning("Cart item %r has quantity %s, using %s", name, quantity, MIN_QUANTITY)
            quantity = MIN_QUANTITY

        original_price = float(data.get("original_price") or 0)
        if not math.isfinite(original_price):
            raise ValidationException(f"Cart item {name!r} has invalid price {original_price}")
        original_price = max(0.0, original_price)
        discount_raw = data.get("discount_price")
        discount_price = original_price if discount_raw is None else float(discount_raw)
        if not math.isfinite(discount_price):
            logger.warning("Cart item %r discount price %s is not a number", name, discount_price)
            discount_price = original_price
        clamped = min(max(discount_price, 0.0), original_price)
        if clamped != discount_price:
            logger.warning(
                "Cart item %r discount price %s out of range, clamped to %s",
                name,
                discount_price,
                clamped,
            )

        return cls(
            id=str(data.get("_id", "")),
            name=name,
            image=str(data.get("image", "")),
            category=str(data.get("category", "")),
            description=str(data.get("description", "")),
            quantity=quantity,
            original_price=original_price,
            discount_price=clamped,
        )

    def to_payload(self) -> dict[str, Any]:
        """Request body for the add-item endpoint."""
        return {
            "name": self.name,
            "image": self.image,
            "category": self.category,
            "description": self.description,
            "quantity": int(self.quantity),
            "original_price": self.original_price,
            "discount_price": self.discount_price,
        }

    def to_dict(self) -> dict[str, Any]:
        return {"_id": self.id, **self.to_payload()}


def calc_item_count(items: Iterable[CartItem]) -> int:
    return sum(item.quantity for item in items)


def calc_total_price(items: Iterable[CartItem]) -> float:
    return round(sum(item.line_total for item in items), 2)


def discounted_price(price: float, discount_percent: float | None) -> float:
    """Apply a category discount rate; missing or zero rate keeps the price."""
    if not discount_percent:
        return float(price)
    return float(price) - float(price) * (float(discount_percent) / 100)


def random_category_discounts(
    categories: Iterable[str], rng: random.Random | None = None
) -> dict[str, int]:
    """Draw a whole-percent discount rate per category."""
    rng = rng or random.Random()
    span = MAX_CATEGORY_DISCOUNT - MIN_CATEGORY_DISCOUNT + 1
    return {
        category: math.floor(rng.random() * span) + MIN_CATEGORY_DISCOUNT
        for category in dict.fromkeys(categories)
    }


def price_for_category(product: Product, discounts: dict[str, int]) -> float:
    return discounted_price(product.price, discounts.get(product.category))
