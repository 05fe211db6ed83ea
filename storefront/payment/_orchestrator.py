"""
PaymentOrchestrator — turns a CheckoutSession into a placed order.

One orchestrator serves one CheckoutSession. The internal order id is
captured from the create-order response and is the only id ever sent back
to the storefront API (verify, failure report, navigation).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from combinators import lift as L
from kungfu import Error, LazyCoroResult, Ok, Result

from storefront import wire as W
from storefront._config import Settings
from storefront._errors import ErrorKind, Errors, StoreError
from storefront._sync import Settled, SyncPolicy, Tracker
from storefront._types import OrderId
from storefront.auth import AuthGate, Navigator
from storefront.cart import CartManager
from storefront.checkout import CheckoutSession
from storefront.messages import Channel, Notice
from storefront.payment._gateway import (
    Completed,
    Dismissed,
    GatewayCheckout,
    GatewayLoader,
    GatewayOptions,
    Prefill,
)
from storefront.payment._types import GatewayOrderRef, OrderRef, PaymentMethod, PaymentState, PaymentStatus, Receipt
from storefront.transport import Api

logger = structlog.get_logger(__name__)

CHECKOUT_PATH = "/checkout"


def order_path(order_id: OrderId) -> str:
    return f"/orders/{order_id}"


class PaymentOrchestrator:
    """
    Payment state machine for one checkout session.

    Example:
        payment.begin_from(navigator.current_state)
        match await payment.pay(PaymentMethod.ONLINE):
            case Ok(receipt):
                ...  # navigator is at /orders/<id>
            case Error(e) if e.kind is ErrorKind.CANCELLED:
                ...  # buyer may press pay again, same order is reused
    """

    def __init__(
        self,
        api: Api,
        gate: AuthGate,
        cart: CartManager,
        navigator: Navigator,
        channel: Channel,
        loader: GatewayLoader,
        settings: Settings,
    ) -> None:
        self._api = api
        self._gate = gate
        self._cart = cart
        self._navigator = navigator
        self._channel = channel
        self._loader = loader
        self._settings = settings
        self._tracker = Tracker("payment", SyncPolicy.single_flight())
        self._state = PaymentState.INIT
        self._session: CheckoutSession | None = None
        self._order: OrderRef | None = None

    @property
    def state(self) -> PaymentState:
        return self._state

    @property
    def session(self) -> CheckoutSession | None:
        return self._session

    @property
    def order(self) -> OrderRef | None:
        return self._order

    @property
    def busy(self) -> bool:
        return self._tracker.busy

    def close(self) -> None:
        self._tracker.close()

    # ═══════════════════════════════════════════════════════════════════════
    # Entry
    # ═══════════════════════════════════════════════════════════════════════

    def begin(self, session: CheckoutSession | None) -> Result[CheckoutSession, StoreError]:
        """Accept the session handed over by checkout. None sends the buyer back."""
        if session is None:
            error = Errors.validation("Invalid checkout session")
            self._channel.fail("payment", error)
            self._navigator.go(CHECKOUT_PATH)
            return Error(error)

        if session != self._session:
            self._session = session
            self._order = None
            self._move(PaymentState.INIT)
        return Ok(session)

    def begin_from(self, state: Mapping[str, Any] | None) -> Result[CheckoutSession, StoreError]:
        return self.begin(CheckoutSession.from_state(state))

    async def pay(self, method: PaymentMethod | str = PaymentMethod.ONLINE) -> Result[Receipt, StoreError]:
        """
        Place the order. A second call while one is outstanding fails with
        BUSY and sends nothing.
        """
        method = PaymentMethod(method)

        session = self._session
        if session is None:
            return Error(self.begin(None).unwrap_err())

        if self._state.terminal:
            return Error(Errors.validation("This checkout has already been settled"))

        match self._gate.require(message="Please login to continue"):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        match await self._tracker.run(LazyCoroResult(lambda: self._attempt(session, method))):
            case Ok(Settled(receipt, _)):
                return Ok(receipt)
            case Error(e):
                return Error(e)

    async def payment_status(self, order_id: OrderId) -> Result[PaymentStatus, StoreError]:
        result = await self._api.get(f"/payment/status/{order_id}", W.PaymentStatusReply)
        return result.map(lambda reply: PaymentStatus.from_reply(order_id, reply))

    # ═══════════════════════════════════════════════════════════════════════
    # Attempt
    # ═══════════════════════════════════════════════════════════════════════

    async def _attempt(self, session: CheckoutSession, method: PaymentMethod) -> Result[Receipt, StoreError]:
        self._move(PaymentState.ORDER_CREATING)

        match await self._create(session, method):
            case Error(e):
                self._move(PaymentState.ERROR)
                self._channel.fail("payment", e)
                return Error(e)
            case Ok(order):
                self._order = order

        match method:
            case PaymentMethod.COD:
                return await self._complete_cod(order)
            case PaymentMethod.ONLINE:
                return await self._pay_online(order)

    async def _create(self, session: CheckoutSession, method: PaymentMethod) -> Result[OrderRef, StoreError]:
        if self._order is not None and self._order.method is method:
            logger.info("order_reused", order_id=self._order.id)
            return Ok(self._order)

        # the session's key belongs to its first order; a method switch gets its own
        key = session.idempotency_key if self._order is None else f"{session.idempotency_key}:{method.value}"
        body = W.CreateOrder(
            address_id=session.address_id,
            payment_method=method.value,
            coupon_code=session.coupon_code,
        )
        logger.info("order_creating", method=method.value, total=session.total)

        match await self._api.post("/payment/create-order", W.CreateOrderReply, body, key=key):
            case Error(e):
                return Error(e)
            case Ok(reply):
                pass

        order = OrderRef.from_reply(reply, method)
        if order is None:
            logger.error("order_id_missing")
            return Error(Errors.invalid_response("Order created but ID is missing"))
        if method is PaymentMethod.ONLINE and order.gateway is None:
            logger.error("gateway_order_missing", order_id=order.id)
            return Error(Errors.invalid_response("Invalid order response - missing gateway order"))

        logger.info("order_created", order_id=order.id, order_number=order.number)
        return Ok(order)

    async def _complete_cod(self, order: OrderRef) -> Result[Receipt, StoreError]:
        await self._clear_cart()
        self._move(PaymentState.COMPLETED_COD)
        self._channel.publish(Notice.success("payment", "Order placed successfully!"))
        self._navigator.go(order_path(order.id), {"order_placed": True})
        return Ok(Receipt(order.id, PaymentMethod.COD, self._state))

    async def _pay_online(self, order: OrderRef) -> Result[Receipt, StoreError]:
        if order.gateway is None:
            self._move(PaymentState.ERROR)
            return Error(Errors.invalid_response("Invalid order response - missing gateway order"))
        descriptor = order.gateway

        match await self._loader.load():
            case Error(e):
                self._move(PaymentState.ERROR)
                self._channel.fail("payment", e)
                return Error(e)
            case Ok(gateway):
                pass

        self._move(PaymentState.GATEWAY_OPEN)
        match await self._open(gateway, self._options(order, descriptor)):
            case Error(e):
                self._move(PaymentState.ERROR)
                self._channel.fail("payment", e)
                return Error(e)
            case Ok(Dismissed(reason)):
                self._move(PaymentState.CANCELLED)
                error = Errors.cancelled()
                self._channel.publish(Notice.failure("payment", error))
                await self._report_failure(order, reason)
                return Error(error)
            case Ok(Completed() as completed):
                return await self._verify(order, completed)
            case Ok(other):
                logger.error("gateway_outcome_unknown", outcome=repr(other))
                self._move(PaymentState.ERROR)
                return Error(Errors.invalid_response("Unexpected gateway outcome"))

    async def _open(self, gateway: GatewayCheckout, options: GatewayOptions) -> Result[Completed | Dismissed, StoreError]:
        return await L.catching_async(
            lambda: gateway.open(options),
            on_error=lambda exc: Errors.gateway_unavailable("Failed to initialize payment"),
        )

    async def _verify(self, order: OrderRef, completed: Completed) -> Result[Receipt, StoreError]:
        self._move(PaymentState.VERIFYING)
        body = W.VerifyPayment(
            gateway_order_id=completed.gateway_order_id,
            gateway_payment_id=completed.gateway_payment_id,
            signature=completed.signature,
            order_id=order.id,
        )

        match await self._api.post("/payment/verify", W.VerifyReply, body):
            case Ok(_):
                await self._clear_cart()
                self._move(PaymentState.COMPLETED_ONLINE)
                self._channel.publish(Notice.success("payment", "Payment successful!"))
                self._navigator.go(order_path(order.id), {"order_placed": True, "payment_success": True})
                return Ok(Receipt(order.id, PaymentMethod.ONLINE, self._state))
            case Error(e):
                logger.warning("payment_verify_failed", order_id=order.id, kind=e.kind.name, message=e.message)
                self._move(PaymentState.VERIFY_FAILED)
                error = Errors.verification()
                self._channel.publish(Notice.failure("payment", error))
                await self._report_failure(order, e.message)
                if e.kind is not ErrorKind.SESSION_EXPIRED:
                    self._navigator.go(order_path(order.id))
                return Error(error)

    # ═══════════════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════════════

    def _options(self, order: OrderRef, descriptor: GatewayOrderRef) -> GatewayOptions:
        buyer = self._gate.session.buyer
        return GatewayOptions(
            key=self._settings.gateway_key,
            amount=descriptor.amount,
            currency=descriptor.currency,
            name=self._settings.merchant_name,
            description=f"Order #{order.number}",
            order_id=descriptor.id,
            prefill=Prefill(
                name=order.contact.name or (buyer.name if buyer else ""),
                email=order.contact.email or (buyer.email if buyer else ""),
                contact=order.contact.phone or (buyer.phone if buyer else ""),
            ),
            theme_color=self._settings.theme_color,
        )

    async def _report_failure(self, order: OrderRef, reason: str) -> None:
        """Best-effort: a failed report is logged, never surfaced."""
        body = W.PaymentFailure(order_id=order.id, error=reason)
        match await self._api.post("/payment/failure", W.Reply, body):
            case Error(e):
                logger.warning("payment_failure_report_failed", order_id=order.id, kind=e.kind.name)
            case Ok(_):
                logger.info("payment_failure_reported", order_id=order.id, reason=reason)

    async def _clear_cart(self) -> None:
        match await self._cart.clear(quiet=True):
            case Error(e):
                logger.warning("cart_clear_after_order_failed", kind=e.kind.name)
            case Ok(_):
                pass

    def _move(self, state: PaymentState) -> None:
        if state is not self._state:
            logger.debug("payment_state", previous=self._state.value, current=state.value)
        self._state = state


__all__ = ("PaymentOrchestrator", "CHECKOUT_PATH", "order_path")
