import asyncio
from collections.abc import AsyncIterator, Callable

import httpx
import pytest

from storefront import Buyer, Settings, Storefront
from storefront.cart import ProductRef
from storefront.checkout import CheckoutSession
from storefront.payment import Completed, GatewayOptions, ScriptedGateway

from examples.shop_backend import ShopState, create_app, sign

BUYER = Buyer("u1", "Asha Rao", "asha@example.com", "9876543210")

MUG = ProductRef("p1", "Ceramic Mug", 100)
NOTEBOOK = ProductRef("p2", "Notebook", 250)
LAMP = ProductRef("p3", "Desk Lamp", 400)


def pay_ok(options: GatewayOptions) -> Completed:
    """A gateway completion with a valid signature for the opened order."""
    return Completed(options.order_id, "pay_1", sign(options.order_id, "pay_1"))


async def eventually(predicate: Callable[[], bool], attempts: int = 2000) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition was never reached")


async def checkout_session(shop: Storefront, *, coupon: str | None = None) -> CheckoutSession:
    """Mug x2, optional coupon, address selected, proceeded to payment."""
    await shop.cart.add(MUG, 2)
    calc = shop.checkout()
    calc.select_address("addr_1")
    if coupon is not None:
        await calc.apply_coupon(coupon)
    return (await calc.proceed()).unwrap()


@pytest.fixture()
def backend() -> ShopState:
    return ShopState.seeded()


@pytest.fixture()
def settings() -> Settings:
    return Settings().with_api_url("http://shop.test/api").with_gateway(key="rzp_test_key")


@pytest.fixture()
def transport(backend: ShopState) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=create_app(backend))


@pytest.fixture()
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture()
async def shop(settings: Settings, transport: httpx.ASGITransport, gateway: ScriptedGateway) -> AsyncIterator[Storefront]:
    async def load_gateway() -> ScriptedGateway:
        return gateway

    async with Storefront(settings, transport=transport, gateway=load_gateway) as shop:
        yield shop


@pytest.fixture()
async def signed_in(shop: Storefront) -> Storefront:
    await shop.login(BUYER)
    return shop
