"""Tests for cart domain types and price math."""
from __future__ import annotations

import random

import pytest

from app.core.exceptions import ValidationException
from app.domain.cart import (
    CartItem,
    Product,
    calc_item_count,
    calc_total_price,
    discounted_price,
    price_for_category,
    random_category_discounts,
)
from conftest import make_item


def _product(**overrides) -> Product:
    fields = {
        "id": 7,
        "title": "Paneer Tikka",
        "price": 100.0,
        "category": "Appetizer",
        "image": "paneer.jpg",
        "description": "Grilled cottage cheese",
    }
    fields.update(overrides)
    return Product(**fields)


def test_from_product_fixes_discount_at_add_time() -> None:
    item = CartItem.from_product(_product(), 90.0)

    assert item.name == "Paneer Tikka"
    assert item.quantity == 1
    assert item.original_price == 100.0
    assert item.discount_price == 90.0
    assert item.to_payload() == {
        "name": "Paneer Tikka",
        "image": "paneer.jpg",
        "category": "Appetizer",
        "description": "Grilled cottage cheese",
        "quantity": 1,
        "original_price": 100.0,
        "discount_price": 90.0,
    }


@pytest.mark.parametrize("discount", [-1.0, 100.01])
def test_from_product_rejects_discount_out_of_range(discount: float) -> None:
    with pytest.raises(ValidationException):
        CartItem.from_product(_product(), discount)


def test_from_product_rejects_missing_title() -> None:
    with pytest.raises(ValidationException):
        CartItem.from_product(_product(title=""), 50.0)


def test_from_dict_normalizes_server_payload() -> None:
    item = CartItem.from_dict(
        {
            "_id": "abc",
            "name": "Gulab Jamun",
            "quantity": 0,
            "original_price": 60,
            "discount_price": 75,
        }
    )

    assert item.id == "abc"
    assert item.quantity == 1
    assert item.discount_price == 60.0


def test_from_dict_defaults_discount_to_original_price() -> None:
    item = CartItem.from_dict({"_id": "x", "name": "Lassi", "quantity": 3, "original_price": 40})

    assert item.discount_price == 40.0
    assert item.to_dict()["_id"] == "x"


def test_totals_use_discount_price() -> None:
    items = [
        make_item("Paneer Tikka", quantity=2, discount=90.0),
        make_item("Masala Dosa", quantity=3, discount=45.5),
    ]

    assert calc_item_count(items) == 5
    assert calc_total_price(items) == 316.5
    assert calc_total_price([]) == 0


def test_discounted_price() -> None:
    assert discounted_price(200, 25) == 150.0
    assert discounted_price(200, None) == 200.0
    assert discounted_price(200, 0) == 200.0


def test_random_category_discounts_range() -> None:
    discounts = random_category_discounts(
        ["Appetizer", "Dessert", "Appetizer", "Beverage"], random.Random(3)
    )

    assert list(discounts) == ["Appetizer", "Dessert", "Beverage"]
    assert all(5 <= rate <= 34 for rate in discounts.values())


def test_price_for_category() -> None:
    product = _product(category="Dessert", price=80.0)

    assert price_for_category(product, {"Dessert": 10}) == 72.0
    assert price_for_category(product, {}) == 80.0


def test_product_from_catalog_payload() -> None:
    product = Product.from_dict(
        {"id": "3", "title": "Veg Biryani", "price": "150", "category": "Main Course"}
    )

    assert product.id == 3
    assert product.price == 150.0
    assert product.image == ""


def test_from_dict_rejects_non_finite_price() -> None:
    with pytest.raises(ValidationException):
        CartItem.from_dict({"_id": "x", "name": "Lassi", "original_price": float("nan")})


def test_from_dict_replaces_non_finite_discount() -> None:
    item = CartItem.from_dict(
        {"_id": "x", "name": "Lassi", "original_price": 40, "discount_price": float("inf")}
    )

    assert item.discount_price == 40.0
    assert 0 <= item.discount_price <= item.original_price
