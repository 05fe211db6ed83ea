"""
Wire models — request and response bodies of the storefront API.

Responses are validated leniently (unknown fields ignored, Mongo `_id`
accepted as `id`); requests are dumped in camelCase.
"""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ═══════════════════════════════════════════════════════════════════════════════
# Base classes
# ═══════════════════════════════════════════════════════════════════════════════


class Reply(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    success: bool = True
    message: str | None = None


class Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Catalogue fragments
# ═══════════════════════════════════════════════════════════════════════════════


class ImagePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str = ""


class ProductPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    price: float = 0
    final_price: float | None = Field(default=None, validation_alias=AliasChoices("finalPrice", "final_price"))
    images: list[ImagePayload] = Field(default_factory=list[ImagePayload])
    thumbnail: str | None = None

    @property
    def thumbnail_url(self) -> str | None:
        if self.thumbnail:
            return self.thumbnail
        return self.images[0].url if self.images else None


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


class CartLinePayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    product: ProductPayload | str
    quantity: int = Field(ge=1)
    price: float | None = None
    final_price: float | None = Field(default=None, validation_alias=AliasChoices("finalPrice", "final_price"))


class CartData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: list[CartLinePayload] = Field(default_factory=list[CartLinePayload])


class CartReply(Reply):
    data: CartData | None = None
    items: list[CartLinePayload] | None = None

    @property
    def lines(self) -> list[CartLinePayload]:
        if self.data is not None:
            return self.data.items
        return self.items or []


class CartMutation(Body):
    product_id: str
    quantity: int


# ═══════════════════════════════════════════════════════════════════════════════
# Wishlist
# ═══════════════════════════════════════════════════════════════════════════════


class WishlistReply(Reply):
    items: list[ProductPayload] = Field(
        default_factory=list[ProductPayload],
        validation_alias=AliasChoices("items", "wishlistItems"),
    )
    is_added: bool | None = Field(default=None, validation_alias=AliasChoices("isAdded", "is_added"))


class WishlistToggle(Body):
    product_id: str


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout
# ═══════════════════════════════════════════════════════════════════════════════


class CouponPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str


class CouponReply(Reply):
    coupon: CouponPayload | None = None
    discount: float = 0


class CouponCheck(Body):
    code: str
    items_price: float


# ═══════════════════════════════════════════════════════════════════════════════
# Payment
# ═══════════════════════════════════════════════════════════════════════════════


class ContactPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    email: str = ""
    phone: str = ""


class OrderPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | None = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    order_number: str | None = Field(default=None, validation_alias=AliasChoices("orderNumber", "order_number"))
    status: str = "pending"
    payment_method: str | None = Field(default=None, validation_alias=AliasChoices("paymentMethod", "payment_method"))
    payment_status: str | None = Field(default=None, validation_alias=AliasChoices("paymentStatus", "payment_status"))
    user: ContactPayload | None = None
    shipping_address: ContactPayload | None = Field(
        default=None, validation_alias=AliasChoices("shippingAddress", "shipping_address")
    )


class GatewayOrderPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    amount: int
    currency: str = "INR"


class CreateOrderReply(Reply):
    order: OrderPayload | None = None
    gateway_order: GatewayOrderPayload | None = Field(
        default=None,
        validation_alias=AliasChoices("gatewayOrder", "razorpayOrder", "gateway_order"),
    )


class CreateOrder(Body):
    address_id: str
    payment_method: Literal["cod", "online"]
    coupon_code: str | None = None


class VerifyPayment(Body):
    gateway_order_id: str
    gateway_payment_id: str
    signature: str
    order_id: str


class VerifyReply(Reply):
    order: OrderPayload | None = None


class PaymentFailure(Body):
    order_id: str
    error: str


class PaymentStatusReply(Reply):
    payment_status: str | None = Field(default=None, validation_alias=AliasChoices("paymentStatus", "payment_status"))
    status: str | None = None


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
