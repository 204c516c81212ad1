"""Cart models and their storage text format."""
import json
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field

from gomarket.errors import CartDecodeError, ERROR_INVALID_CART_DATA

Price = Union[int, float]


@dataclass(frozen=True)
class CartItem:
    """Single product line in the cart."""
    id: str
    title: str
    image_url: str
    price: Price
    quantity: int

    def with_quantity(self, quantity: int) -> "CartItem":
        """Copy of this item with another quantity."""
        return replace(self, quantity=quantity)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "image_url": self.image_url,
            "price": self.price,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CartItem":
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            title=data["title"],
            image_url=data["image_url"],
            price=data["price"],
            quantity=_whole_quantity(data["quantity"]),
        )


def _whole_quantity(value: Any) -> int:
    """Stored quantity as int; fractional or non-numeric values are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"quantity must be a whole number, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"quantity must be a whole number, got {value!r}")
    return int(value)


class ProductInput(BaseModel):
    """Product offered to the cart: a CartItem without quantity."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = Field(description="Product id, unique within the cart")
    title: str = Field(description="Display title")
    image_url: str = Field(description="Display image URL")
    price: Price = Field(description="Unit price")

    def to_cart_item(self, quantity: int = 1) -> CartItem:
        return CartItem(
            id=self.id,
            title=self.title,
            image_url=self.image_url,
            price=self.price,
            quantity=quantity,
        )


def as_product_input(candidate: Union[ProductInput, Mapping[str, Any]]) -> ProductInput:
    """Validate a mapping into ProductInput; pass ProductInput through."""
    if isinstance(candidate, ProductInput):
        return candidate
    return ProductInput.model_validate(candidate)


def dump_products(items: Iterable[CartItem]) -> str:
    """Serialize items to the JSON array kept in storage."""
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False)


def load_products(text: str) -> tuple[CartItem, ...]:
    """Parse the stored JSON array back into items, order preserved."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CartDecodeError(f"{ERROR_INVALID_CART_DATA}: {e}") from e

    if not isinstance(data, list):
        raise CartDecodeError(f"{ERROR_INVALID_CART_DATA}: expected a list, got {type(data).__name__}")

    try:
        items = tuple(CartItem.from_dict(raw) for raw in data)
    except (KeyError, TypeError, ValueError) as e:
        raise CartDecodeError(f"{ERROR_INVALID_CART_DATA}: {e!r}") from e

    seen = set()
    for item in items:
        if item.id in seen:
            raise CartDecodeError(f"{ERROR_INVALID_CART_DATA}: duplicate id {item.id!r}")
        seen.add(item.id)
    return items
