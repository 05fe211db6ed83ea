"""
Cart types — immutable snapshots of the server's cart.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront._types import Amount, ProductId
from storefront.wire import CartLinePayload, ProductPayload


# ═══════════════════════════════════════════════════════════════════════════════
# Product Reference
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProductRef:
    """Denormalized product data carried by cart and wishlist entries."""

    id: ProductId
    name: str = ""
    price: Amount = 0
    thumbnail: str | None = None

    @classmethod
    def from_wire(cls, payload: ProductPayload | str) -> ProductRef:
        if isinstance(payload, str):
            return cls(id=payload)
        price = payload.final_price if payload.final_price is not None else payload.price
        return cls(
            id=payload.id,
            name=payload.name,
            price=price,
            thumbnail=payload.thumbnail_url,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Line Item / Cart
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLineItem:
    product: ProductRef
    quantity: int
    unit_price: Amount

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {self.quantity}")

    @property
    def line_total(self) -> Amount:
        return self.unit_price * self.quantity

    @classmethod
    def from_wire(cls, payload: CartLinePayload) -> CartLineItem:
        product = ProductRef.from_wire(payload.product)
        # finalPrice, then price, then the product's own price
        if payload.final_price:
            unit_price = payload.final_price
        elif payload.price:
            unit_price = payload.price
        else:
            unit_price = product.price
        return cls(product=product, quantity=payload.quantity, unit_price=unit_price)


@dataclass(frozen=True, slots=True)
class Cart:
    """
    One snapshot of the cart.

    Lines are keyed by product id; if the server ever sends two lines for the
    same product the later one wins.
    """

    lines: tuple[CartLineItem, ...] = ()

    @classmethod
    def of(cls, lines: list[CartLineItem] | tuple[CartLineItem, ...]) -> Cart:
        by_product: dict[ProductId, CartLineItem] = {}
        for line in lines:
            by_product[line.product.id] = line
        return cls(tuple(by_product.values()))

    @classmethod
    def from_wire(cls, payloads: list[CartLinePayload]) -> Cart:
        return cls.of([CartLineItem.from_wire(p) for p in payloads])

    @property
    def total(self) -> Amount:
        return sum((line.line_total for line in self.lines), 0)

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def empty(self) -> bool:
        return not self.lines

    def line(self, product_id: ProductId) -> CartLineItem | None:
        return next((line for line in self.lines if line.product.id == product_id), None)


EMPTY_CART = Cart()


__all__ = ("ProductRef", "CartLineItem", "Cart", "EMPTY_CART")
