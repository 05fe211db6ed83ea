"""
WishlistGuard — server-held product set with a single-flight toggle.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from kungfu import Error, Ok, Result

from storefront import wire as W
from storefront._errors import ErrorKind, Errors, StoreError
from storefront._sync import Settled, SyncPolicy, Tracker
from storefront._types import ProductId, ResourceState
from storefront.auth import AuthGate
from storefront.cart import ProductRef
from storefront.messages import Channel, Notice
from storefront.transport import Api

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ToggleOutcome:
    is_added: bool
    items: tuple[ProductRef, ...]


class WishlistGuard:
    """
    One in-flight wishlist call at a time, across all products.

    Example:
        match await wishlist.toggle(product):
            case Ok(ToggleOutcome(is_added=True)):
                ...
            case Error(e) if e.kind is ErrorKind.BUSY:
                ...  # ignored click
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
        self._tracker = Tracker("wishlist", policy or SyncPolicy.single_flight())
        self._items: tuple[ProductRef, ...] = ()

    @property
    def items(self) -> tuple[ProductRef, ...]:
        return self._items

    @property
    def state(self) -> ResourceState:
        return self._tracker.state

    @property
    def busy(self) -> bool:
        return self._tracker.busy

    def contains(self, product_id: ProductId) -> bool:
        return any(item.id == product_id for item in self._items)

    def count(self) -> int:
        return len(self._items)

    # ─────────────────────────────────────────────────────────────────────────
    # Sync
    # ─────────────────────────────────────────────────────────────────────────

    async def fetch(self) -> Result[tuple[ProductRef, ...], StoreError]:
        match await self._tracker.run(self._api.get("/wishlist", W.WishlistReply)):
            case Ok(Settled(reply, applied)):
                if applied:
                    self._replace(reply.items)
                return Ok(self._items)
            case Error(e):
                logger.warning("wishlist_fetch_failed", kind=e.kind.name)
                self._channel.fail("wishlist", e, "Failed to load wishlist")
                return Error(e)

    async def sync(self) -> Result[tuple[ProductRef, ...], StoreError]:
        if self._gate.session.authenticated:
            return await self.fetch()
        self.reset()
        return Ok(self._items)

    def reset(self) -> None:
        self._items = ()

    def close(self) -> None:
        self._tracker.close()

    # ─────────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────────

    async def toggle(self, product: ProductRef, *, path: str | None = None) -> Result[ToggleOutcome, StoreError]:
        """Flip membership of `product`. Rejected with BUSY while another call is outstanding."""
        if self._tracker.busy:
            logger.debug("wishlist_toggle_ignored", product_id=product.id)
            return Error(Errors.busy())

        match self._gate.require(path, "Please login to manage wishlist"):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        body = W.WishlistToggle(product_id=product.id)
        match await self._tracker.run(self._api.post("/wishlist/toggle", W.WishlistReply, body)):
            case Ok(Settled(reply, applied)):
                is_added = bool(reply.is_added)
                if applied:
                    self._replace(reply.items)
                    self._channel.publish(
                        Notice.success("wishlist", "Added to wishlist!" if is_added else "Removed from wishlist")
                    )
                logger.info("wishlist_toggled", product_id=product.id, is_added=is_added)
                return Ok(ToggleOutcome(is_added, self._items))
            case Error(e):
                logger.warning("wishlist_toggle_failed", product_id=product.id, kind=e.kind.name)
                if e.kind is ErrorKind.RATE_LIMITED:
                    self._channel.publish(Notice.failure("wishlist", Errors.rate_limited()))
                else:
                    self._channel.fail("wishlist", e, "Failed to update wishlist")
                return Error(e)

    async def add(self, product: ProductRef, *, path: str | None = None) -> Result[tuple[ProductRef, ...], StoreError]:
        """Ensure `product` is in the wishlist."""
        match self._gate.require(path, "Please login to add items to wishlist"):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass
        if self.contains(product.id):
            return Ok(self._items)
        return (await self.toggle(product, path=path)).map(lambda outcome: outcome.items)

    async def remove(self, product_id: ProductId) -> Result[tuple[ProductRef, ...], StoreError]:
        """Ensure `product_id` is not in the wishlist. Signed-out or absent is a no-op."""
        if not self._gate.session.authenticated:
            return Ok(self._items)
        product = next((item for item in self._items if item.id == product_id), None)
        if product is None:
            return Ok(self._items)
        return (await self.toggle(product)).map(lambda outcome: outcome.items)

    async def clear(self) -> Result[tuple[ProductRef, ...], StoreError]:
        if not self._gate.session.authenticated:
            return Ok(self._items)

        match await self._tracker.run(self._api.delete("/wishlist/clear", W.Reply)):
            case Ok(Settled(_, applied)):
                if applied:
                    self._items = ()
                    self._channel.publish(Notice.success("wishlist", "Wishlist cleared"))
                return Ok(self._items)
            case Error(e):
                self._channel.fail("wishlist", e, "Failed to clear wishlist")
                return Error(e)

    def _replace(self, payloads: list[W.ProductPayload]) -> None:
        self._items = tuple(ProductRef.from_wire(p) for p in payloads)


__all__ = ("WishlistGuard", "ToggleOutcome")
