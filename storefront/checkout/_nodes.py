"""
Pricing graph — from checkout input to an immutable CheckoutSession.

    CheckoutInput ─┬─ SubtotalNode ─┬─ ShippingNode ─┐
                   │                └────────────────┼─ TotalNode ─ SessionNode
                   └─ DiscountNode ──────────────────┘
"""

from dataclasses import dataclass

from nodnod import scalar_node as node

from storefront._config import Settings
from storefront._types import Amount
from storefront.cart import Cart
from storefront.checkout._pricing import Coupon, compute_shipping, compute_total
from storefront.checkout._session import CheckoutSession


@dataclass(frozen=True, slots=True)
class CheckoutInput:
    cart: Cart
    address_id: str
    coupon: Coupon | None
    idempotency_key: str


@node
class SubtotalNode:
    def __init__(self, amount: Amount) -> None:
        self.amount = amount

    @classmethod
    def __compose__(cls, data: CheckoutInput) -> "SubtotalNode":
        return cls(data.cart.total)


@node
class ShippingNode:
    """Flat charge below the free-shipping threshold."""

    def __init__(self, amount: Amount) -> None:
        self.amount = amount

    @classmethod
    def __compose__(cls, subtotal: SubtotalNode, settings: Settings) -> "ShippingNode":
        return cls(compute_shipping(subtotal.amount, settings))


@node
class DiscountNode:
    def __init__(self, amount: Amount, code: str | None) -> None:
        self.amount = amount
        self.code = code

    @classmethod
    def __compose__(cls, data: CheckoutInput) -> "DiscountNode":
        if data.coupon is None:
            return cls(0, None)
        return cls(data.coupon.discount, data.coupon.code)


@node
class TotalNode:
    def __init__(self, amount: Amount) -> None:
        self.amount = amount

    @classmethod
    def __compose__(cls, subtotal: SubtotalNode, shipping: ShippingNode, discount: DiscountNode) -> "TotalNode":
        return cls(compute_total(subtotal.amount, shipping.amount, discount.amount))


@node
class SessionNode:
    """Final node: the session handed to payment."""

    def __init__(self, data: CheckoutSession) -> None:
        self.data = data

    @classmethod
    def __compose__(
        cls,
        data: CheckoutInput,
        subtotal: SubtotalNode,
        shipping: ShippingNode,
        discount: DiscountNode,
        total: TotalNode,
    ) -> "SessionNode":
        return cls(
            CheckoutSession(
                address_id=data.address_id,
                subtotal=subtotal.amount,
                discount=discount.amount,
                shipping=shipping.amount,
                total=total.amount,
                coupon_code=discount.code,
                idempotency_key=data.idempotency_key,
            )
        )


__all__ = ("CheckoutInput", "SubtotalNode", "ShippingNode", "DiscountNode", "TotalNode", "SessionNode")
