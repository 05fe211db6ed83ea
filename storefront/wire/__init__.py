"""
Wire — pydantic models for the storefront REST contract.

    from storefront import wire as W

    reply = W.CartReply.model_validate(body)
    payload = W.CartMutation(product_id="p1", quantity=2).dump()
"""

from storefront.wire._models import (
    Reply,
    Body,
    ImagePayload,
    ProductPayload,
    CartLinePayload,
    CartData,
    CartReply,
    CartMutation,
    WishlistReply,
    WishlistToggle,
    CouponPayload,
    CouponReply,
    CouponCheck,
    ContactPayload,
    OrderPayload,
    GatewayOrderPayload,
    CreateOrderReply,
    CreateOrder,
    VerifyPayment,
    VerifyReply,
    PaymentFailure,
    PaymentStatusReply,
)

__all__ = (
    "Reply",
    "Body",
    "ImagePayload",
    "ProductPayload",
    "CartLinePayload",
    "CartData",
    "CartReply",
    "CartMutation",
    "WishlistReply",
    "WishlistToggle",
    "CouponPayload",
    "CouponReply",
    "CouponCheck",
    "ContactPayload",
    "OrderPayload",
    "GatewayOrderPayload",
    "CreateOrderReply",
    "CreateOrder",
    "VerifyPayment",
    "VerifyReply",
    "PaymentFailure",
    "PaymentStatusReply",
)
