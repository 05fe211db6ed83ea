import asyncio

import httpx

from storefront import ErrorKind, Settings, Storefront
from storefront.checkout import CheckoutSession
from storefront.payment import (
    Completed,
    Dismissed,
    GatewayLoader,
    GatewayOptions,
    PaymentMethod,
    PaymentState,
    PaymentStatus,
    ScriptedGateway,
)

from tests.conftest import BUYER, checkout_session, eventually, pay_ok


def bad_signature(options: GatewayOptions) -> Completed:
    return Completed(options.order_id, "pay_1", "forged")


class TestCashOnDelivery:
    async def test_places_order_without_gateway(self, signed_in: Storefront, backend, gateway):
        session = await checkout_session(signed_in)
        payment = signed_in.payment(session)

        receipt = (await payment.pay("cod")).unwrap()

        assert receipt.order_id == "ord_1"
        assert receipt.state is PaymentState.COMPLETED_COD
        assert gateway.opened == []
        assert backend.calls_to("POST", "/api/payment/verify") == []
        assert backend.orders["ord_1"].payment_method == "cod"
        assert signed_in.channel.last("payment").text == "Order placed successfully!"

    async def test_create_order_carries_session_key(self, signed_in: Storefront, backend):
        session = await checkout_session(signed_in)

        await signed_in.payment(session).pay(PaymentMethod.COD)

        (call,) = backend.calls_to("POST", "/api/payment/create-order")
        assert call.idempotency_key == session.idempotency_key

    async def test_lands_on_order_page_with_empty_cart(self, signed_in: Storefront, backend):
        session = await checkout_session(signed_in)

        await signed_in.payment(session).pay("cod")

        visit = signed_in.navigator.current
        assert visit.path == "/orders/ord_1"
        assert visit.state == {"order_placed": True}
        assert signed_in.cart.cart.empty
        assert backend.cart == {}

    async def test_status_lookup(self, signed_in: Storefront):
        session = await checkout_session(signed_in)
        payment = signed_in.payment(session)
        await payment.pay("cod")

        status = (await payment.payment_status("ord_1")).unwrap()

        assert status == PaymentStatus("ord_1", "pending", "confirmed")


class TestOnline:
    async def test_success_verifies_once_with_internal_id(self, signed_in: Storefront, backend, gateway):
        gateway.outcomes.append(pay_ok)
        session = await checkout_session(signed_in, coupon="SAVE50")
        payment = signed_in.payment(session)

        receipt = (await payment.pay()).unwrap()

        assert receipt.state is PaymentState.COMPLETED_ONLINE
        assert len(backend.calls_to("POST", "/api/payment/verify")) == 1
        assert backend.orders["ord_1"].payment_status == "paid"
        visit = signed_in.navigator.current
        assert visit.path == "/orders/ord_1"
        assert visit.state == {"order_placed": True, "payment_success": True}
        assert signed_in.cart.cart.empty
        assert signed_in.channel.last("payment").text == "Payment successful!"

    async def test_widget_is_opened_with_order_details(self, signed_in: Storefront, gateway):
        gateway.outcomes.append(pay_ok)
        session = await checkout_session(signed_in, coupon="SAVE50")

        await signed_in.payment(session).pay()

        (options,) = gateway.opened
        assert session.total == 200
        assert options.amount == 20000
        assert options.currency == "INR"
        assert options.key == "rzp_test_key"
        assert options.order_id == "gw_ord_1"
        assert options.description == "Order #ORD-0001"
        assert options.prefill.name == BUYER.name
        assert options.prefill.email == BUYER.email
        assert options.prefill.contact == "9876543210"

    async def test_dismissal_then_retry_reuses_order(self, signed_in: Storefront, backend, gateway):
        session = await checkout_session(signed_in)
        payment = signed_in.payment(session)

        first = await payment.pay()

        assert first.unwrap_err().kind is ErrorKind.CANCELLED
        assert payment.state is PaymentState.CANCELLED
        assert backend.orders["ord_1"].failures == ["Payment cancelled by user"]
        assert signed_in.cart.count() == 2
        assert signed_in.channel.last("payment").text == "Payment cancelled"

        gateway.outcomes.append(pay_ok)
        second = await payment.pay()

        assert second.unwrap().order_id == "ord_1"
        assert len(backend.calls_to("POST", "/api/payment/create-order")) == 1
        assert len(backend.orders) == 1
        assert len(gateway.opened) == 2

    async def test_switching_method_creates_a_distinct_order(self, signed_in: Storefront, backend, gateway):
        session = await checkout_session(signed_in)
        payment = signed_in.payment(session)
        await payment.pay()

        receipt = (await payment.pay("cod")).unwrap()

        assert receipt.order_id == "ord_2"
        keys = [c.idempotency_key for c in backend.calls_to("POST", "/api/payment/create-order")]
        assert keys == [session.idempotency_key, f"{session.idempotency_key}:cod"]

    async def test_rejected_signature_is_terminal(self, signed_in: Storefront, backend, gateway):
        gateway.outcomes.append(bad_signature)
        session = await checkout_session(signed_in)
        payment = signed_in.payment(session)

        result = await payment.pay()

        assert result.unwrap_err().kind is ErrorKind.VERIFICATION
        assert payment.state is PaymentState.VERIFY_FAILED
        assert backend.orders["ord_1"].failures == ["Payment verification failed"]
        assert signed_in.cart.count() == 2
        assert signed_in.navigator.current_path == "/orders/ord_1"

        again = await payment.pay()
        assert again.unwrap_err().message == "This checkout has already been settled"
        assert len(backend.calls_to("POST", "/api/payment/create-order")) == 1

    async def test_widget_crash_is_recoverable(self, signed_in: Storefront, gateway):
        def crash(options: GatewayOptions) -> Completed:
            raise RuntimeError("widget crashed")

        gateway.outcomes.extend([crash, pay_ok])
        session = await checkout_session(signed_in)
        payment = signed_in.payment(session)

        error = (await payment.pay()).unwrap_err()
        assert error.kind is ErrorKind.GATEWAY_UNAVAILABLE
        assert error.message == "Failed to initialize payment"
        assert payment.state is PaymentState.ERROR

        assert (await payment.pay()).unwrap().state is PaymentState.COMPLETED_ONLINE


class TestGatewayLoading:
    async def test_failed_load_is_retried_on_next_pay(self, settings, transport, backend):
        gateway = ScriptedGateway([pay_ok])
        attempts: list[int] = []

        async def flaky() -> ScriptedGateway:
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("script blocked")
            return gateway

        async with Storefront(settings, transport=transport, gateway=flaky) as shop:
            await shop.login(BUYER)
            payment = shop.payment(await checkout_session(shop))

            error = (await payment.pay()).unwrap_err()
            assert error.kind is ErrorKind.GATEWAY_UNAVAILABLE
            assert payment.state is PaymentState.ERROR
            assert shop.channel.last("payment").text == "Failed to load payment gateway"

            assert await payment.pay()
            assert len(attempts) == 2
            assert len(backend.orders) == 1

    async def test_concurrent_loads_share_one_factory_call(self):
        calls: list[int] = []

        async def factory() -> ScriptedGateway:
            calls.append(1)
            await asyncio.sleep(0)
            return ScriptedGateway()

        loader = GatewayLoader(factory, Settings())
        results = await asyncio.gather(loader.load(), loader.load(), loader.load())

        assert len(calls) == 1
        assert loader.loads == 1
        assert len({id(r.unwrap()) for r in results}) == 1

    async def test_slow_load_times_out(self):
        async def factory() -> ScriptedGateway:
            await asyncio.sleep(5)
            return ScriptedGateway()

        loader = GatewayLoader(factory, Settings().with_timeouts(gateway_load_seconds=0.01))

        result = await loader.load()

        assert result.unwrap_err().kind is ErrorKind.GATEWAY_UNAVAILABLE
        assert not loader.loaded

    async def test_unconfigured_gateway_fails_cleanly(self, settings, transport):
        async with Storefront(settings, transport=transport) as shop:
            assert (await shop.gateway.load()).unwrap_err().kind is ErrorKind.GATEWAY_UNAVAILABLE


class TestGuards:
    async def test_second_pay_while_creating_is_busy(self, signed_in: Storefront, backend):
        session = await checkout_session(signed_in)
        payment = signed_in.payment(session)
        release = backend.hold("POST", "/api/payment/create-order")

        first = asyncio.create_task(payment.pay("cod"))
        await eventually(lambda: len(backend.orders) == 1)

        second = await payment.pay("cod")
        assert second.unwrap_err().kind is ErrorKind.BUSY
        assert payment.busy

        release.set()
        assert (await first).unwrap().state is PaymentState.COMPLETED_COD
        assert len(backend.calls_to("POST", "/api/payment/create-order")) == 1

    async def test_missing_session_returns_to_checkout(self, signed_in: Storefront, backend):
        payment = signed_in.payment(None)

        assert signed_in.navigator.current_path == "/checkout"
        assert signed_in.channel.last("payment").text == "Invalid checkout session"
        assert (await payment.pay()).unwrap_err().kind is ErrorKind.VALIDATION
        assert backend.calls_to("POST", "/api/payment/create-order") == []

    async def test_session_from_navigation_state(self, signed_in: Storefront):
        session = await checkout_session(signed_in)
        payment = signed_in.payment()

        assert payment.session == session
        assert signed_in.navigator.current_path == "/payment"
        assert not payment.begin_from({"checkout_session": "stale"})
        assert payment.session == session
        assert (await payment.pay("cod")).unwrap().order_id == "ord_1"

    async def test_signed_out_buyer_cannot_pay(self, signed_in: Storefront, backend):
        session = await checkout_session(signed_in)
        payment = signed_in.payment(session)
        signed_in.logout()

        result = await payment.pay("cod")

        assert result.unwrap_err().kind is ErrorKind.AUTH_REQUIRED
        assert signed_in.navigator.current_path == "/login"
        assert backend.calls_to("POST", "/api/payment/create-order") == []

    async def test_failed_create_can_be_retried(self, signed_in: Storefront, backend):
        session = await checkout_session(signed_in)
        payment = signed_in.payment(session)
        backend.fail("POST", "/api/payment/create-order", 500)

        assert (await payment.pay("cod")).unwrap_err().kind is ErrorKind.SERVER
        assert payment.state is PaymentState.ERROR

        assert (await payment.pay("cod")).unwrap().order_id == "ord_1"
        keys = {c.idempotency_key for c in backend.calls_to("POST", "/api/payment/create-order")}
        assert keys == {session.idempotency_key}

    async def test_replayed_session_yields_the_same_order(self, signed_in: Storefront, backend):
        session = await checkout_session(signed_in)
        await signed_in.payment(session).pay("cod")

        reloaded = signed_in.payment(session)
        receipt = (await reloaded.pay("cod")).unwrap()

        assert receipt.order_id == "ord_1"
        assert len(backend.orders) == 1
        assert len(backend.calls_to("POST", "/api/payment/create-order")) == 2

    async def test_dismissed_outcome_carries_reason(self, signed_in: Storefront, backend, gateway):
        gateway.outcomes.append(Dismissed("Buyer closed the window"))
        payment = signed_in.payment(await checkout_session(signed_in))

        await payment.pay()

        assert backend.orders["ord_1"].failures == ["Buyer closed the window"]

    async def test_online_order_without_gateway_descriptor(self, settings, gateway):
        async def load_gateway() -> ScriptedGateway:
            return gateway

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": True, "order": {"_id": "ord_9", "orderNumber": "ORD-0009"}})

        session = CheckoutSession("addr_1", 200, 0, 50, 250, None, "key-1")
        async with Storefront(settings, transport=httpx.MockTransport(handler), gateway=load_gateway) as shop:
            shop.session.login(BUYER)
            payment = shop.payment(session)

            error = (await payment.pay()).unwrap_err()

            assert error.kind is ErrorKind.INVALID_RESPONSE
            assert error.message == "Invalid order response - missing gateway order"
            assert payment.state is PaymentState.ERROR
            assert gateway.opened == []
