"""
Checkout — pricing, coupon and the hand-off session.

    from storefront import checkout as CO

    CO.compute_shipping(400, settings)   # 50
    CO.compute_total(400, 50, 0)         # 450

    calc = CO.CheckoutCalculator(api, cart, navigator, channel, settings)
"""

from storefront.checkout._pricing import Coupon, Summary, compute_shipping, compute_total, summarize
from storefront.checkout._session import CheckoutSession, SESSION_STATE_KEY
from storefront.checkout._nodes import (
    CheckoutInput,
    SubtotalNode,
    ShippingNode,
    DiscountNode,
    TotalNode,
    SessionNode,
)
from storefront.checkout._graph import compose
from storefront.checkout._calculator import CheckoutCalculator, PAYMENT_PATH, PRODUCTS_PATH

__all__ = (
    "Coupon",
    "Summary",
    "compute_shipping",
    "compute_total",
    "summarize",
    "CheckoutSession",
    "SESSION_STATE_KEY",
    "CheckoutInput",
    "SubtotalNode",
    "ShippingNode",
    "DiscountNode",
    "TotalNode",
    "SessionNode",
    "compose",
    "CheckoutCalculator",
    "PAYMENT_PATH",
    "PRODUCTS_PATH",
)
