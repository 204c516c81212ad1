"""
Tests for cart models and the stored text format
"""

import json

import pytest
from pydantic import ValidationError

from gomarket.cart import CartItem, ProductInput, dump_products, load_products
from gomarket.errors import CartDecodeError


class TestCartItem:
    """Tests for CartItem dataclass."""

    def test_create_cart_item(self):
        item = CartItem(id="p1", title="Shoe", image_url="u", price=10, quantity=1)

        assert item.id == "p1"
        assert item.quantity == 1

    def test_with_quantity_returns_new_item(self):
        item = CartItem(id="p1", title="Shoe", image_url="u", price=10, quantity=1)

        bumped = item.with_quantity(2)

        assert bumped.quantity == 2
        assert item.quantity == 1
        assert bumped.title == "Shoe"

    def test_items_are_immutable(self):
        item = CartItem(id="p1", title="Shoe", image_url="u", price=10, quantity=1)

        with pytest.raises(AttributeError):
            item.quantity = 5

    def test_to_dict(self):
        item = CartItem(id="p1", title="Shoe", image_url="u", price=10, quantity=3)

        assert item.to_dict() == {
            "id": "p1",
            "title": "Shoe",
            "image_url": "u",
            "price": 10,
            "quantity": 3,
        }

    def test_from_dict(self):
        item = CartItem.from_dict(
            {"id": "p1", "title": "Shoe", "image_url": "u", "price": 10.5, "quantity": -1}
        )

        assert item == CartItem(id="p1", title="Shoe", image_url="u", price=10.5, quantity=-1)


class TestProductInput:
    """Tests for the add-to-cart candidate."""

    def test_from_mapping(self, shoe):
        product = ProductInput.model_validate(shoe)

        assert product.id == "p1"
        assert product.price == 10

    def test_to_cart_item_starts_at_one(self, shoe):
        item = ProductInput.model_validate(shoe).to_cart_item()

        assert item == CartItem(id="p1", title="Shoe", image_url="u", price=10, quantity=1)

    def test_ignores_quantity_field(self, shoe):
        product = ProductInput.model_validate({**shoe, "quantity": 7})

        assert product.to_cart_item().quantity == 1

    def test_missing_field_rejected(self):
        with pytest.raises(ValidationError):
            ProductInput.model_validate({"id": "p1", "title": "Shoe"})

    def test_empty_id_accepted(self, shoe):
        item = ProductInput.model_validate({**shoe, "id": ""}).to_cart_item()

        assert item.id == ""
        assert item.quantity == 1


class TestSerialization:
    """Tests for dump_products / load_products."""

    def test_dump_is_json_array_in_order(self):
        items = [
            CartItem(id="p2", title="Shirt", image_url="s", price=24.9, quantity=1),
            CartItem(id="p1", title="Shoe", image_url="u", price=10, quantity=2),
        ]

        data = json.loads(dump_products(items))

        assert [raw["id"] for raw in data] == ["p2", "p1"]
        assert set(data[0]) == {"id", "title", "image_url", "price", "quantity"}

    def test_round_trip_preserves_values_and_order(self):
        items = (
            CartItem(id="b", title="Bag", image_url="x", price=99.99, quantity=0),
            CartItem(id="a", title="Ação", image_url="y", price=1, quantity=-2),
        )

        assert load_products(dump_products(items)) == items

    def test_empty_list(self):
        assert load_products(dump_products([])) == ()

    def test_invalid_json(self):
        with pytest.raises(CartDecodeError):
            load_products("{not json")

    def test_not_a_list(self):
        with pytest.raises(CartDecodeError):
            load_products('{"id": "p1"}')

    def test_missing_field(self):
        with pytest.raises(CartDecodeError):
            load_products('[{"id": "p1", "title": "Shoe"}]')

    def test_fractional_quantity_rejected(self):
        with pytest.raises(CartDecodeError):
            load_products('[{"id": "p1", "title": "Shoe", "image_url": "u", "price": 10, "quantity": 2.5}]')

    def test_whole_float_quantity_accepted(self):
        items = load_products('[{"id": "p1", "title": "Shoe", "image_url": "u", "price": 10, "quantity": 2.0}]')

        assert items[0].quantity == 2
        assert isinstance(items[0].quantity, int)

    def test_non_numeric_quantity_rejected(self):
        with pytest.raises(CartDecodeError):
            load_products('[{"id": "p1", "title": "Shoe", "image_url": "u", "price": 10, "quantity": "2"}]')

    def test_duplicate_ids_rejected(self):
        text = dump_products([
            CartItem(id="p1", title="Shoe", image_url="u", price=10, quantity=1),
            CartItem(id="p1", title="Shoe", image_url="u", price=10, quantity=3),
        ])

        with pytest.raises(CartDecodeError, match="duplicate"):
            load_products(text)

    def test_decode_error_is_value_error(self):
        with pytest.raises(ValueError):
            load_products("null")
