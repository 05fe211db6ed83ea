"""
CheckoutCalculator — address, coupon and pricing for one checkout visit.
"""

from __future__ import annotations

import structlog
from kungfu import Error, Ok, Result

from storefront import wire as W
from storefront._config import Settings
from storefront._errors import Errors, StoreError
from storefront._sync import Settled, SyncPolicy, Tracker
from storefront.auth import Navigator
from storefront.cart import Cart, CartManager
from storefront.checkout._graph import compose
from storefront.checkout._nodes import CheckoutInput, SessionNode
from storefront.checkout._pricing import Coupon, Summary, summarize
from storefront.checkout._session import CheckoutSession
from storefront.messages import Channel, Notice
from storefront.transport import Api, new_key

logger = structlog.get_logger(__name__)

PAYMENT_PATH = "/payment"
PRODUCTS_PATH = "/products"


class CheckoutCalculator:
    """
    Live checkout state. Create one per visit to the checkout page and
    close it on leave; a fresh calculator starts without a coupon.

    Example:
        calc = CheckoutCalculator(api, cart, navigator, channel, settings)
        calc.select_address("addr_1")
        await calc.apply_coupon("SAVE50")
        match await calc.proceed():
            case Ok(session):
                ...  # navigator is now at /payment with the session as state
    """

    def __init__(
        self,
        api: Api,
        cart: CartManager,
        navigator: Navigator,
        channel: Channel,
        settings: Settings,
    ) -> None:
        self._api = api
        self._cart = cart
        self._navigator = navigator
        self._channel = channel
        self._settings = settings
        self._coupons = Tracker("coupon", SyncPolicy.single_flight())
        self._address_id: str | None = None
        self._coupon: Coupon | None = None
        self._unsubscribe = cart.subscribe(self._on_cart)

    @property
    def address_id(self) -> str | None:
        return self._address_id

    @property
    def coupon(self) -> Coupon | None:
        return self._coupon

    def open(self) -> bool:
        """Check the cart on entry. Returns False (and redirects) when it is empty."""
        if self._cart.cart.empty:
            self._leave_empty()
            return False
        return True

    def close(self) -> None:
        self._unsubscribe()
        self._coupons.close()

    def select_address(self, address_id: str) -> None:
        self._address_id = address_id or None

    def summary(self) -> Summary:
        return summarize(self._cart.total(), self._coupon, self._settings)

    # ─────────────────────────────────────────────────────────────────────────
    # Coupon
    # ─────────────────────────────────────────────────────────────────────────

    async def apply_coupon(self, code: str) -> Result[Coupon, StoreError]:
        """
        Validate `code` against the current subtotal. Only a successful
        validation replaces the applied coupon.
        """
        code = code.strip()
        if not code:
            error = Errors.validation("Please enter a coupon code")
            self._channel.fail("checkout", error)
            return Error(error)

        body = W.CouponCheck(code=code, items_price=self._cart.total())
        match await self._coupons.run(self._api.post("/checkout/validate-coupon", W.CouponReply, body)):
            case Ok(Settled(reply, applied)):
                coupon = Coupon(reply.coupon.code if reply.coupon else code, reply.discount)
                if applied:
                    self._coupon = coupon
                    self._channel.publish(
                        Notice.success("checkout", f"Coupon applied! You saved ₹{reply.discount:g}")
                    )
                logger.info("coupon_applied", code=coupon.code, discount=coupon.discount)
                return Ok(coupon)
            case Error(e):
                logger.info("coupon_rejected", code=code, kind=e.kind.name)
                self._channel.fail("checkout", e, "Invalid coupon code")
                return Error(e)

    async def remove_coupon(self) -> Result[None, StoreError]:
        """Clear the coupon. The server call is best-effort; local state is always cleared."""
        match await self._api.post("/checkout/remove-coupon", W.Reply):
            case Error(e):
                logger.warning("coupon_remove_failed", kind=e.kind.name, message=e.message)
            case Ok(_):
                pass

        self._coupon = None
        self._channel.publish(Notice.success("checkout", "Coupon removed"))
        return Ok(None)

    # ─────────────────────────────────────────────────────────────────────────
    # Proceed
    # ─────────────────────────────────────────────────────────────────────────

    async def proceed(self) -> Result[CheckoutSession, StoreError]:
        """Freeze pricing into a CheckoutSession and hand it to the payment page."""
        if self._address_id is None:
            error = Errors.validation("Please select a delivery address")
            self._channel.fail("checkout", error)
            return Error(error)

        cart = self._cart.cart
        if cart.empty:
            self._leave_empty()
            return Error(Errors.validation("Your cart is empty"))

        data = CheckoutInput(cart, self._address_id, self._coupon, new_key())
        session = (await compose(SessionNode, data, self._settings)).data

        logger.info("checkout_session_created", address_id=session.address_id, total=session.total)
        # leaving checkout: the post-order cart clear must not bounce to /products
        self._unsubscribe()
        self._navigator.go(PAYMENT_PATH, session.as_state())
        return Ok(session)

    def _on_cart(self, cart: Cart) -> None:
        if cart.empty:
            self._leave_empty()

    def _leave_empty(self) -> None:
        self._channel.publish(Notice.failure("checkout", Errors.validation("Your cart is empty")))
        self._navigator.go(PRODUCTS_PATH)


__all__ = ("CheckoutCalculator", "PAYMENT_PATH", "PRODUCTS_PATH")
