"""
Storefront — one buyer session with every component wired together.
"""

from __future__ import annotations

from types import TracebackType

import httpx

from storefront._config import Settings
from storefront._log import logger
from storefront._sync import SyncPolicy
from storefront.auth import AuthGate, Buyer, MemoryNavigator, MemorySlot, Navigator, ResumeSlot, Session
from storefront.cart import CartManager
from storefront.checkout import CheckoutCalculator, CheckoutSession
from storefront.messages import Channel, Inbox, Notice, RealtimeEvent
from storefront.payment import GatewayCheckout, GatewayFactory, GatewayLoader, PaymentOrchestrator
from storefront.transport import Api, Interceptor
from storefront.wishlist import WishlistGuard


async def _no_gateway() -> GatewayCheckout:
    raise RuntimeError("no payment gateway configured")


class Storefront:
    """
    Composition root.

    Example:
        async with Storefront(settings, gateway=load_gateway) as shop:
            await shop.login(Buyer("u1", "Asha", "asha@example.com"))
            await shop.cart.add(ProductRef("p1", "Mug", 100), 2)

            calc = shop.checkout()
            calc.select_address("addr_1")
            match await calc.proceed():
                case Ok(session):
                    await shop.payment(session).pay("cod")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        navigator: Navigator | None = None,
        slot: ResumeSlot | None = None,
        channel: Channel | None = None,
        gateway: GatewayFactory | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        cart_policy: SyncPolicy | None = None,
    ) -> None:
        self.settings = settings if settings is not None else Settings.from_env()
        self.navigator: Navigator = navigator if navigator is not None else MemoryNavigator()
        self.channel = channel if channel is not None else Channel()
        self.inbox = Inbox()
        self.session = Session()
        self.gate = AuthGate(
            self.session,
            slot if slot is not None else MemorySlot(),
            self.navigator,
            self.channel,
            self.settings,
        )
        self.api = Api(
            self.settings,
            Interceptor(self.session, self.navigator, self.channel, self.settings),
            transport=transport,
        )
        self.cart = CartManager(self.api, self.gate, self.channel, cart_policy)
        self.wishlist = WishlistGuard(self.api, self.gate, self.channel)
        self.gateway = GatewayLoader(gateway or _no_gateway, self.settings)

        self.session.on_change(self._on_session)
        self.inbox.on_event(self._on_realtime)

    # ─────────────────────────────────────────────────────────────────────────
    # Session
    # ─────────────────────────────────────────────────────────────────────────

    async def login(self, buyer: Buyer) -> str | None:
        """
        Start the buyer's session, pull cart and wishlist, and go back to
        where the gate interrupted them. Returns that destination, or None
        when the server rejected the session while syncing.
        """
        self.session.login(buyer)
        await self.cart.sync()
        await self.wishlist.sync()
        if not self.session.authenticated:
            logger.warning("buyer_login_dropped", buyer_id=buyer.id)
            return None
        destination = self.gate.resume()
        logger.info("buyer_logged_in", buyer_id=buyer.id, destination=destination)
        self.navigator.go(destination)
        return destination

    def logout(self) -> None:
        self.session.logout()

    # ─────────────────────────────────────────────────────────────────────────
    # Flows
    # ─────────────────────────────────────────────────────────────────────────

    def checkout(self) -> CheckoutCalculator:
        """A fresh calculator for one visit to the checkout page."""
        calc = CheckoutCalculator(self.api, self.cart, self.navigator, self.channel, self.settings)
        calc.open()
        return calc

    def payment(self, session: CheckoutSession | None = None) -> PaymentOrchestrator:
        """
        An orchestrator bound to `session`, or to the one handed over in the
        current navigation state. No session at all redirects to checkout.
        """
        orchestrator = PaymentOrchestrator(
            self.api,
            self.gate,
            self.cart,
            self.navigator,
            self.channel,
            self.gateway,
            self.settings,
        )
        if session is None:
            orchestrator.begin_from(self.navigator.current_state)
        else:
            orchestrator.begin(session)
        return orchestrator

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    async def aclose(self) -> None:
        self.cart.close()
        self.wishlist.close()
        await self.api.aclose()

    async def __aenter__(self) -> Storefront:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def _on_session(self, buyer: Buyer | None) -> None:
        if buyer is None:
            self.cart.reset()
            self.wishlist.reset()
            logger.info("buyer_logged_out")

    def _on_realtime(self, event: RealtimeEvent) -> None:
        text = event.payload.get("message") or event.type
        self.channel.publish(Notice.info("notifications", str(text)))


__all__ = ("Storefront",)
