"""
Pricing — shipping and total arithmetic.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront._config import Settings
from storefront._types import Amount


@dataclass(frozen=True, slots=True)
class Coupon:
    code: str
    discount: Amount


@dataclass(frozen=True, slots=True)
class Summary:
    """The figures shown beside the checkout form."""

    subtotal: Amount
    shipping: Amount
    discount: Amount
    total: Amount

    @property
    def free_shipping(self) -> bool:
        return self.shipping == 0


def compute_shipping(subtotal: Amount, settings: Settings) -> Amount:
    """Flat charge below the free-shipping threshold, zero at or above it."""
    if subtotal < settings.free_shipping_threshold:
        return settings.shipping_charge
    return 0


def compute_total(subtotal: Amount, shipping: Amount, discount: Amount) -> Amount:
    """subtotal + shipping - discount, never below zero."""
    return max(subtotal + shipping - discount, 0)


def summarize(subtotal: Amount, coupon: Coupon | None, settings: Settings) -> Summary:
    shipping = compute_shipping(subtotal, settings)
    discount = coupon.discount if coupon else 0
    return Summary(subtotal, shipping, discount, compute_total(subtotal, shipping, discount))


__all__ = ("Coupon", "Summary", "compute_shipping", "compute_total", "summarize")
