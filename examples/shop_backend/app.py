"""
Shop API — FastAPI app over ShopState.

Speaks the storefront wire format (camelCase, Mongo-style `_id`,
`{"success": ..., "message": ...}` envelopes). Idempotent mutating
routes replay the stored reply for a repeated Idempotency-Key.
"""

import math
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from examples.shop_backend.store import Call, Order, ShopState, sign


# ═══════════════════════════════════════════════════════════════════════════════
# Request bodies
# ═══════════════════════════════════════════════════════════════════════════════


class CamelBody(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CartMutationIn(CamelBody):
    product_id: str
    quantity: int = 1


class WishlistToggleIn(CamelBody):
    product_id: str


class CouponIn(CamelBody):
    code: str
    items_price: float


class CreateOrderIn(CamelBody):
    address_id: str
    payment_method: str
    coupon_code: str | None = None


class VerifyIn(CamelBody):
    gateway_order_id: str
    gateway_payment_id: str
    signature: str
    order_id: str


class FailureIn(CamelBody):
    order_id: str
    error: str


def reject(status: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse({"success": False, "message": message, **extra}, status_code=status)


# ═══════════════════════════════════════════════════════════════════════════════
# App
# ═══════════════════════════════════════════════════════════════════════════════


def create_app(state: ShopState) -> FastAPI:
    app = FastAPI(title="shop-backend")
    api = APIRouter(prefix="/api")

    @app.middleware("http")
    async def controls(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        method, path = request.method, request.url.path
        key = request.headers.get("Idempotency-Key")
        state.calls.append(Call(method, path, key))

        failure = state.take_failure(method, path)
        if failure is not None:
            extra = {"redirectTo": failure.redirect_to} if failure.redirect_to else {}
            return reject(failure.status, failure.message or "Scripted failure", **extra)

        if key is not None and (path, key) in state.replies:
            return JSONResponse(state.replies[(path, key)])

        response = await call_next(request)

        release = state.take_hold(method, path)
        if release is not None:
            await release.wait()
        return response

    def remember(path: str, request: Request, body: dict[str, Any]) -> dict[str, Any]:
        key = request.headers.get("Idempotency-Key")
        if key is not None:
            state.replies[(path, key)] = body
        return body

    # ─────────────────────────────────────────────────────────────────────────
    # Cart
    # ─────────────────────────────────────────────────────────────────────────

    def cart_reply(message: str | None = None) -> dict[str, Any]:
        return {"success": True, "message": message, "data": {"items": state.cart_lines()}}

    @api.get("/cart")
    async def get_cart() -> dict[str, Any]:
        return cart_reply()

    @api.post("/cart/add", response_model=None)
    async def add_to_cart(body: CartMutationIn) -> dict[str, Any] | JSONResponse:
        if body.product_id not in state.products:
            return reject(404, "Product not found")
        if body.quantity < 1:
            return reject(400, "Quantity must be at least 1")
        state.cart[body.product_id] = state.cart.get(body.product_id, 0) + body.quantity
        return cart_reply("Item added to cart")

    @api.put("/cart/update", response_model=None)
    async def update_cart(body: CartMutationIn) -> dict[str, Any] | JSONResponse:
        if body.product_id not in state.cart:
            return reject(404, "Item not in cart")
        if body.quantity < 1:
            del state.cart[body.product_id]
        else:
            state.cart[body.product_id] = body.quantity
        return cart_reply("Cart updated")

    @api.delete("/cart/remove/{product_id}", response_model=None)
    async def remove_from_cart(product_id: str) -> dict[str, Any] | JSONResponse:
        if product_id not in state.cart:
            return reject(404, "Item not in cart")
        del state.cart[product_id]
        return cart_reply("Item removed")

    @api.delete("/cart/clear")
    async def clear_cart() -> dict[str, Any]:
        state.cart.clear()
        return cart_reply("Cart cleared")

    # ─────────────────────────────────────────────────────────────────────────
    # Wishlist
    # ─────────────────────────────────────────────────────────────────────────

    @api.get("/wishlist")
    async def get_wishlist() -> dict[str, Any]:
        return {"success": True, "wishlistItems": state.wishlist_items()}

    @api.post("/wishlist/toggle", response_model=None)
    async def toggle_wishlist(body: WishlistToggleIn) -> dict[str, Any] | JSONResponse:
        if body.product_id not in state.products:
            return reject(404, "Product not found")
        if body.product_id in state.wishlist:
            state.wishlist.remove(body.product_id)
            is_added = False
        else:
            state.wishlist.append(body.product_id)
            is_added = True
        return {"success": True, "isAdded": is_added, "wishlistItems": state.wishlist_items()}

    @api.delete("/wishlist/clear")
    async def clear_wishlist() -> dict[str, Any]:
        state.wishlist.clear()
        return {"success": True, "wishlistItems": []}

    # ─────────────────────────────────────────────────────────────────────────
    # Checkout
    # ─────────────────────────────────────────────────────────────────────────

    @api.post("/checkout/validate-coupon", response_model=None)
    async def validate_coupon(body: CouponIn) -> dict[str, Any] | JSONResponse:
        rule = state.coupons.get(body.code.upper())
        if rule is None:
            return reject(400, "Invalid coupon code")
        if body.items_price < rule.min_order:
            return reject(400, f"Minimum order value is ₹{rule.min_order:g}")
        return {"success": True, "coupon": {"code": rule.code}, "discount": rule.discount}

    @api.post("/checkout/remove-coupon")
    async def remove_coupon() -> dict[str, Any]:
        return {"success": True, "message": "Coupon removed"}

    # ─────────────────────────────────────────────────────────────────────────
    # Payment
    # ─────────────────────────────────────────────────────────────────────────

    def order_payload(order: Order, address_id: str | None = None) -> dict[str, Any]:
        address = state.addresses.get(address_id or "", {})
        return {
            "_id": order.id,
            "orderNumber": order.number,
            "status": order.status,
            "paymentMethod": order.payment_method,
            "paymentStatus": order.payment_status,
            "user": {"name": state.buyer.get("name", ""), "email": state.buyer.get("email", "")},
            "shippingAddress": address,
        }

    @api.post("/payment/create-order", response_model=None)
    async def create_order(body: CreateOrderIn, request: Request) -> dict[str, Any] | JSONResponse:
        if body.address_id not in state.addresses:
            return reject(400, "Please select a valid address")
        if not state.cart:
            return reject(400, "Cart is empty")
        if body.payment_method not in ("cod", "online"):
            return reject(400, "Invalid payment method")

        items_price = state.cart_total()
        discount = 0.0
        if body.coupon_code:
            rule = state.coupons.get(body.coupon_code.upper())
            if rule is None or items_price < rule.min_order:
                return reject(400, "Coupon is no longer valid")
            discount = rule.discount
        shipping = state.shipping_charge if items_price < state.free_shipping_threshold else 0
        total = max(items_price + shipping - discount, 0)

        order_id, number = state.next_order_id()
        order = Order(order_id, number, body.payment_method, items_price, shipping, discount, total, body.coupon_code)
        if body.payment_method == "cod":
            order.status = "confirmed"
        state.orders[order_id] = order

        reply: dict[str, Any] = {"success": True, "order": order_payload(order, body.address_id)}
        if body.payment_method == "online":
            order.gateway_order_id = f"gw_{order_id}"
            reply["razorpayOrder"] = {
                "id": order.gateway_order_id,
                "amount": math.ceil(total * 100),
                "currency": "INR",
            }
        return remember("/api/payment/create-order", request, reply)

    @api.post("/payment/verify", response_model=None)
    async def verify_payment(body: VerifyIn) -> dict[str, Any] | JSONResponse:
        order = state.orders.get(body.order_id)
        if order is None:
            return reject(404, "Order not found")
        if order.gateway_order_id != body.gateway_order_id:
            return reject(400, "Payment verification failed")
        if body.signature != sign(body.gateway_order_id, body.gateway_payment_id):
            order.payment_status = "failed"
            return reject(400, "Payment verification failed")
        order.payment_status = "paid"
        order.status = "confirmed"
        return {"success": True, "message": "Payment verified", "order": order_payload(order)}

    @api.post("/payment/failure", response_model=None)
    async def payment_failure(body: FailureIn) -> dict[str, Any] | JSONResponse:
        order = state.orders.get(body.order_id)
        if order is None:
            return reject(404, "Order not found")
        order.failures.append(body.error)
        if order.payment_status != "paid":
            order.payment_status = "failed"
        return {"success": True}

    @api.get("/payment/status/{order_id}", response_model=None)
    async def payment_status(order_id: str) -> dict[str, Any] | JSONResponse:
        order = state.orders.get(order_id)
        if order is None:
            return reject(404, "Order not found")
        return {"success": True, "paymentStatus": order.payment_status, "status": order.status}

    app.include_router(api)
    return app


__all__ = ("create_app", "reject")
