"""
Gateway — the hosted payment widget seam.

The widget is loaded lazily, once per process, and reused afterward.
Opening it is a single await that ends when the buyer either completes
payment or dismisses the widget.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

import structlog
from combinators import flow, lift as L
from kungfu import Error, Ok, Result

from storefront._config import Settings
from storefront._errors import Errors, StoreError

logger = structlog.get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Options / Outcomes
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Prefill:
    name: str = ""
    email: str = ""
    contact: str = ""


@dataclass(frozen=True, slots=True)
class GatewayOptions:
    """What the widget is opened with."""

    key: str
    amount: int
    currency: str
    name: str
    description: str
    order_id: str  # gateway order id
    prefill: Prefill = Prefill()
    theme_color: str = "#4F46E5"


@dataclass(frozen=True, slots=True)
class Completed:
    gateway_order_id: str
    gateway_payment_id: str
    signature: str


@dataclass(frozen=True, slots=True)
class Dismissed:
    reason: str = "Payment cancelled by user"


type GatewayOutcome = Completed | Dismissed


class GatewayCheckout(Protocol):
    async def open(self, options: GatewayOptions) -> GatewayOutcome: ...


type GatewayFactory = Callable[[], Awaitable[GatewayCheckout]]


# ═══════════════════════════════════════════════════════════════════════════════
# Loader
# ═══════════════════════════════════════════════════════════════════════════════


class GatewayLoader:
    """
    Loads the gateway integration exactly once.

    Concurrent callers share one load. A failed or timed-out load is not
    remembered, so the next payment attempt tries again.

    Example:
        loader = GatewayLoader(load_razorpay, settings)
        match await loader.load():
            case Ok(gateway):
                outcome = await gateway.open(options)
    """

    def __init__(self, factory: GatewayFactory, settings: Settings) -> None:
        self._factory = factory
        self._timeout = settings.gateway_load_timeout.total_seconds()
        self._lock = asyncio.Lock()
        self._gateway: GatewayCheckout | None = None
        self._loads = 0

    @property
    def loaded(self) -> bool:
        return self._gateway is not None

    @property
    def loads(self) -> int:
        """How many times the factory completed successfully."""
        return self._loads

    async def load(self) -> Result[GatewayCheckout, StoreError]:
        async with self._lock:
            if self._gateway is not None:
                return Ok(self._gateway)

            result = await (
                flow(L.catching_async(self._factory, on_error=self._load_failed))
                .timeout(seconds=self._timeout)
                .compile()
            )
            match result:
                case Ok(gateway):
                    self._gateway = gateway
                    self._loads += 1
                    logger.info("gateway_loaded")
                    return Ok(gateway)
                case Error(StoreError() as e):
                    return Error(e)
                case Error(_):
                    logger.warning("gateway_load_timeout", seconds=self._timeout)
                    return Error(Errors.gateway_unavailable())

    @staticmethod
    def _load_failed(exc: Exception) -> StoreError:
        logger.warning("gateway_load_failed", error=str(exc))
        return Errors.gateway_unavailable()


# ═══════════════════════════════════════════════════════════════════════════════
# Scripted gateway (headless runs, tests)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class ScriptedGateway:
    """
    Plays back a fixed list of outcomes, one per `open`.

    An outcome may be a callable taking the options, so a completion can
    echo the gateway order id it was opened with.
    """

    outcomes: list[GatewayOutcome | Callable[[GatewayOptions], GatewayOutcome]] = field(default_factory=list)
    opened: list[GatewayOptions] = field(default_factory=list)

    async def open(self, options: GatewayOptions) -> GatewayOutcome:
        self.opened.append(options)
        if not self.outcomes:
            return Dismissed()
        outcome = self.outcomes.pop(0)
        return outcome(options) if callable(outcome) else outcome


__all__ = (
    "Prefill",
    "GatewayOptions",
    "Completed",
    "Dismissed",
    "GatewayOutcome",
    "GatewayCheckout",
    "GatewayFactory",
    "GatewayLoader",
    "ScriptedGateway",
)
