"""
Shop state — in-memory catalogue, carts, orders and test controls.
"""

import asyncio
import hashlib
import hmac
from dataclasses import dataclass, field
from typing import Any

GATEWAY_SECRET = b"test_gateway_secret"


def sign(gateway_order_id: str, payment_id: str) -> str:
    """Gateway-style signature: HMAC-SHA256 of "<order>|<payment>"."""
    message = f"{gateway_order_id}|{payment_id}".encode()
    return hmac.new(GATEWAY_SECRET, message, hashlib.sha256).hexdigest()


# ═══════════════════════════════════════════════════════════════════════════════
# Records
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    id: str
    name: str
    price: float
    final_price: float | None = None

    @property
    def unit_price(self) -> float:
        return self.final_price if self.final_price is not None else self.price

    def dump(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "_id": self.id,
            "name": self.name,
            "price": self.price,
            "images": [{"url": f"https://cdn.example.com/{self.id}.jpg"}],
        }
        if self.final_price is not None:
            data["finalPrice"] = self.final_price
        return data


@dataclass(frozen=True, slots=True)
class CouponRule:
    code: str
    discount: float
    min_order: float = 0


@dataclass(slots=True)
class Order:
    id: str
    number: str
    payment_method: str
    items_price: float
    shipping: float
    discount: float
    total: float
    coupon_code: str | None
    gateway_order_id: str | None = None
    status: str = "pending"
    payment_status: str = "pending"
    failures: list[str] = field(default_factory=list[str])


@dataclass(frozen=True, slots=True)
class Call:
    method: str
    path: str
    idempotency_key: str | None


@dataclass(frozen=True, slots=True)
class Failure:
    status: int
    message: str | None = None
    redirect_to: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# State
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class ShopState:
    """
    Everything the backend knows. One buyer, deterministic ids.

    Test controls:
        state.fail("POST", "/api/wishlist/toggle", 429)     # next call fails
        release = state.hold("POST", "/api/cart/add")       # next response waits
        release.set()
    """

    products: dict[str, Product] = field(default_factory=dict[str, Product])
    coupons: dict[str, CouponRule] = field(default_factory=dict[str, CouponRule])
    cart: dict[str, int] = field(default_factory=dict[str, int])
    wishlist: list[str] = field(default_factory=list[str])
    orders: dict[str, Order] = field(default_factory=dict[str, Order])
    buyer: dict[str, str] = field(default_factory=dict[str, str])
    addresses: dict[str, dict[str, str]] = field(default_factory=dict[str, dict[str, str]])
    shipping_charge: float = 50
    free_shipping_threshold: float = 500

    calls: list[Call] = field(default_factory=list[Call])
    replies: dict[tuple[str, str], Any] = field(default_factory=dict[tuple[str, str], Any])
    failures: dict[tuple[str, str], list[Failure]] = field(default_factory=dict[tuple[str, str], list[Failure]])
    holds: dict[tuple[str, str], list[asyncio.Event]] = field(
        default_factory=dict[tuple[str, str], list[asyncio.Event]]
    )

    @classmethod
    def seeded(cls) -> "ShopState":
        return cls(
            products={
                "p1": Product("p1", "Ceramic Mug", 120, 100),
                "p2": Product("p2", "Notebook", 250),
                "p3": Product("p3", "Desk Lamp", 450, 400),
            },
            coupons={
                "SAVE50": CouponRule("SAVE50", 50),
                "BIG100": CouponRule("BIG100", 100, min_order=500),
                "HUGE": CouponRule("HUGE", 1000),
            },
            buyer={"_id": "u1", "name": "Asha Rao", "email": "asha@example.com"},
            addresses={"addr_1": {"name": "Asha Rao", "phone": "9876543210", "city": "Pune"}},
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Test controls
    # ─────────────────────────────────────────────────────────────────────────

    def fail(
        self,
        method: str,
        path: str,
        status: int,
        message: str | None = None,
        *,
        redirect_to: str | None = None,
        times: int = 1,
    ) -> None:
        queue = self.failures.setdefault((method, path), [])
        queue.extend(Failure(status, message, redirect_to) for _ in range(times))

    def hold(self, method: str, path: str) -> asyncio.Event:
        release = asyncio.Event()
        self.holds.setdefault((method, path), []).append(release)
        return release

    def take_failure(self, method: str, path: str) -> Failure | None:
        queue = self.failures.get((method, path))
        return queue.pop(0) if queue else None

    def take_hold(self, method: str, path: str) -> asyncio.Event | None:
        queue = self.holds.get((method, path))
        return queue.pop(0) if queue else None

    def calls_to(self, method: str, path: str) -> list[Call]:
        return [c for c in self.calls if c.method == method and c.path == path]

    # ─────────────────────────────────────────────────────────────────────────
    # Views
    # ─────────────────────────────────────────────────────────────────────────

    def cart_lines(self) -> list[dict[str, Any]]:
        return [
            {
                "product": self.products[pid].dump(),
                "quantity": qty,
                "price": self.products[pid].unit_price,
            }
            for pid, qty in self.cart.items()
        ]

    def cart_total(self) -> float:
        return sum(self.products[pid].unit_price * qty for pid, qty in self.cart.items())

    def wishlist_items(self) -> list[dict[str, Any]]:
        return [self.products[pid].dump() for pid in self.wishlist]

    def next_order_id(self) -> tuple[str, str]:
        n = len(self.orders) + 1
        return f"ord_{n}", f"ORD-{n:04d}"


__all__ = (
    "GATEWAY_SECRET",
    "sign",
    "Product",
    "CouponRule",
    "Order",
    "Call",
    "Failure",
    "ShopState",
)
