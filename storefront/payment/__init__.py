"""
Payment — order creation, hosted gateway, verification.

    from storefront import payment as P

    loader = P.GatewayLoader(load_gateway, settings)
    orchestrator = P.PaymentOrchestrator(api, gate, cart, navigator, channel, loader, settings)
    orchestrator.begin(session)
    await orchestrator.pay(P.PaymentMethod.COD)
"""

from storefront.payment._types import (
    PaymentState,
    PaymentMethod,
    Contact,
    GatewayOrderRef,
    OrderRef,
    Receipt,
    PaymentStatus,
)
from storefront.payment._gateway import (
    Prefill,
    GatewayOptions,
    Completed,
    Dismissed,
    GatewayOutcome,
    GatewayCheckout,
    GatewayFactory,
    GatewayLoader,
    ScriptedGateway,
)
from storefront.payment._orchestrator import PaymentOrchestrator, CHECKOUT_PATH, order_path

__all__ = (
    "PaymentState",
    "PaymentMethod",
    "Contact",
    "GatewayOrderRef",
    "OrderRef",
    "Receipt",
    "PaymentStatus",
    "Prefill",
    "GatewayOptions",
    "Completed",
    "Dismissed",
    "GatewayOutcome",
    "GatewayCheckout",
    "GatewayFactory",
    "GatewayLoader",
    "ScriptedGateway",
    "PaymentOrchestrator",
    "CHECKOUT_PATH",
    "order_path",
)
