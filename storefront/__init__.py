"""
storefront — buyer-side commerce pipeline.

Cart, wishlist, checkout and payment against a storefront REST API, with
errors as values and explicit concurrency rules.

    from storefront import Storefront, Settings, Buyer
    from storefront import cart as C, payment as P

    async with Storefront(Settings.from_env(), gateway=load_gateway) as shop:
        await shop.login(Buyer("u1", "Asha"))
        await shop.cart.add(C.ProductRef("p1", "Mug", 100), 2)

        calc = shop.checkout()
        calc.select_address("addr_1")
        match await calc.proceed():
            case Ok(session):
                await shop.payment(session).pay(P.PaymentMethod.ONLINE)

Modules:
    auth       — Session, AuthGate, Navigator seam
    cart       — CartManager
    wishlist   — WishlistGuard
    checkout   — CheckoutCalculator, pricing graph, CheckoutSession
    payment    — PaymentOrchestrator, GatewayLoader
    messages   — Channel (notices), Inbox (realtime events)
    transport  — Api (httpx), Interceptor
    wire       — pydantic request/response models
"""

from storefront import _log as _log  # noqa: F401

from storefront._types import Result, Ok, Error, ResourceState
from storefront._errors import ErrorKind, StoreError, Errors
from storefront._config import Settings
from storefront._sync import SyncPolicy, OnBusy, Ordering, ALLOW, REJECT, LAST_RESPONSE, LATEST_REQUEST
from storefront.auth import Buyer
from storefront.app import Storefront

__version__ = "0.1.0"

__all__ = (
    "Result",
    "Ok",
    "Error",
    "ResourceState",
    "ErrorKind",
    "StoreError",
    "Errors",
    "Settings",
    "SyncPolicy",
    "OnBusy",
    "Ordering",
    "ALLOW",
    "REJECT",
    "LAST_RESPONSE",
    "LATEST_REQUEST",
    "Buyer",
    "Storefront",
    "__version__",
)
