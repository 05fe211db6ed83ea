"""
CartManager — local mirror of the server-held cart.

The server is authoritative: every successful response replaces the local
snapshot wholesale, nothing is patched incrementally. A failed call leaves
the snapshot untouched.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog
from kungfu import Error, Ok, Result

from storefront import wire as W
from storefront._errors import StoreError
from storefront._sync import Settled, SyncPolicy, Tracker
from storefront._types import Amount, ProductId, ResourceState
from storefront.auth import AuthGate
from storefront.cart._types import EMPTY_CART, Cart, ProductRef
from storefront.messages import Channel, Notice, Unsubscribe
from storefront.transport import Api

logger = structlog.get_logger(__name__)

type CartListener = Callable[[Cart], None]


class CartManager:
    """
    Cart state for the signed-in buyer.

    Default policy keeps the observed behavior: overlapping calls are allowed
    and the last response to arrive wins. Pass
    `SyncPolicy().with_ordering(LATEST_REQUEST)` to drop stale responses, or
    `SyncPolicy.single_flight()` to reject overlapping calls.
    """

    def __init__(
        self,
        api: Api,
        gate: AuthGate,
        channel: Channel,
        policy: SyncPolicy | None = None,
    ) -> None:
        self._api = api
        self._gate = gate
        self._channel = channel
        self._tracker = Tracker("cart", policy)
        self._cart = EMPTY_CART
        self._listeners: list[CartListener] = []

    # ═══════════════════════════════════════════════════════════════════════
    # State
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def state(self) -> ResourceState:
        return self._tracker.state

    @property
    def busy(self) -> bool:
        return self._tracker.busy

    def total(self) -> Amount:
        return self._cart.total

    def count(self) -> int:
        return self._cart.count

    def contains(self, product_id: ProductId) -> bool:
        return self._cart.line(product_id) is not None

    def quantity_of(self, product_id: ProductId) -> int:
        line = self._cart.line(product_id)
        return line.quantity if line else 0

    def subscribe(self, listener: CartListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ═══════════════════════════════════════════════════════════════════════
    # Sync
    # ═══════════════════════════════════════════════════════════════════════

    async def fetch(self) -> Result[Cart, StoreError]:
        """Pull the canonical cart and replace local state with it."""
        result = await self._tracker.run(self._api.get("/cart", W.CartReply))
        return self._apply(result, failure="Failed to load cart")

    async def sync(self) -> Result[Cart, StoreError]:
        """Fetch when signed in, wipe locally otherwise."""
        if self._gate.session.authenticated:
            return await self.fetch()
        self.reset()
        return Ok(self._cart)

    def reset(self) -> None:
        """Local-only wipe (logout)."""
        self._replace(EMPTY_CART)

    def close(self) -> None:
        """Detach: responses still in flight are discarded when they land."""
        self._tracker.close()
        self._listeners.clear()

    # ═══════════════════════════════════════════════════════════════════════
    # Mutations
    # ═══════════════════════════════════════════════════════════════════════

    async def add(
        self,
        product: ProductRef,
        quantity: int = 1,
        *,
        path: str | None = None,
    ) -> Result[Cart, StoreError]:
        """Add (server merges quantity when the product is already present)."""
        match self._gate.require(path, "Please login to add items to cart"):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        logger.info("cart_add", product_id=product.id, quantity=quantity)
        result = await self._tracker.run(
            self._api.post("/cart/add", W.CartReply, W.CartMutation(product_id=product.id, quantity=quantity))
        )
        return self._apply(result, success="Added to cart successfully!", failure="Failed to add to cart")

    async def remove(self, product_id: ProductId) -> Result[Cart, StoreError]:
        """Remove a line. Absent products are a no-op."""
        if not self.contains(product_id):
            logger.debug("cart_remove_absent", product_id=product_id)
            return Ok(self._cart)

        match self._gate.require(message="Please login first"):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        logger.info("cart_remove", product_id=product_id)
        result = await self._tracker.run(self._api.delete(f"/cart/remove/{product_id}", W.CartReply))
        return self._apply(result, success="Removed from cart", failure="Failed to remove item")

    async def set_quantity(self, product_id: ProductId, quantity: int) -> Result[Cart, StoreError]:
        """Set a line's quantity; zero or less removes it."""
        if quantity <= 0:
            return await self.remove(product_id)

        match self._gate.require(message="Please login first"):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        logger.info("cart_update", product_id=product_id, quantity=quantity)
        result = await self._tracker.run(
            self._api.put("/cart/update", W.CartReply, W.CartMutation(product_id=product_id, quantity=quantity))
        )
        return self._apply(result, failure="Failed to update quantity")

    async def increment(self, product_id: ProductId) -> Result[Cart, StoreError]:
        line = self._cart.line(product_id)
        if line is None:
            return Ok(self._cart)
        return await self.set_quantity(product_id, line.quantity + 1)

    async def decrement(self, product_id: ProductId) -> Result[Cart, StoreError]:
        line = self._cart.line(product_id)
        if line is None:
            return Ok(self._cart)
        if line.quantity == 1:
            return await self.remove(product_id)
        return await self.set_quantity(product_id, line.quantity - 1)

    async def clear(self, *, quiet: bool = False) -> Result[Cart, StoreError]:
        match self._gate.require(message="Please login first"):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        logger.info("cart_clear")
        result = await self._tracker.run(self._api.delete("/cart/clear", W.CartReply))
        match result:
            case Ok(Settled(_, applied)):
                if applied:
                    self._replace(EMPTY_CART)
                    if not quiet:
                        self._channel.publish(Notice.success("cart", "Cart cleared"))
                return Ok(self._cart)
            case Error(e):
                if not quiet:
                    self._channel.fail("cart", e, "Failed to clear cart")
                return Error(e)

    # ═══════════════════════════════════════════════════════════════════════
    # Internals
    # ═══════════════════════════════════════════════════════════════════════

    def _apply(
        self,
        result: Result[Settled[W.CartReply], StoreError],
        *,
        failure: str,
        success: str | None = None,
    ) -> Result[Cart, StoreError]:
        match result:
            case Ok(Settled(reply, applied)):
                if applied:
                    self._replace(Cart.from_wire(reply.lines))
                    if success:
                        self._channel.publish(Notice.success("cart", success))
                return Ok(self._cart)
            case Error(e):
                logger.warning("cart_request_failed", kind=e.kind.name, message=e.message)
                self._channel.fail("cart", e, failure)
                return Error(e)

    def _replace(self, cart: Cart) -> None:
        if cart == self._cart:
            return
        self._cart = cart
        for listener in list(self._listeners):
            listener(cart)


__all__ = ("CartManager", "CartListener")
