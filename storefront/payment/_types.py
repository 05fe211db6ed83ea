"""
Payment types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from storefront._types import OrderId
from storefront.wire import CreateOrderReply, PaymentStatusReply


class PaymentState(Enum):
    """
    INIT ─pay─▶ ORDER_CREATING ─cod─▶ COMPLETED_COD
                      │
                      └─online─▶ GATEWAY_OPEN ─complete─▶ VERIFYING ─ok─▶ COMPLETED_ONLINE
                                      │                        └─fail─▶ VERIFY_FAILED
                                      └─dismiss─▶ CANCELLED

    Any unexpected failure lands in ERROR. CANCELLED and ERROR accept
    another `pay`; the completed states and VERIFY_FAILED do not.
    """

    INIT = "init"
    ORDER_CREATING = "order_creating"
    GATEWAY_OPEN = "gateway_open"
    VERIFYING = "verifying"
    COMPLETED_COD = "completed_cod"
    COMPLETED_ONLINE = "completed_online"
    VERIFY_FAILED = "verify_failed"
    CANCELLED = "cancelled"
    ERROR = "error"

    @property
    def terminal(self) -> bool:
        return self in (PaymentState.COMPLETED_COD, PaymentState.COMPLETED_ONLINE, PaymentState.VERIFY_FAILED)

    @property
    def succeeded(self) -> bool:
        return self in (PaymentState.COMPLETED_COD, PaymentState.COMPLETED_ONLINE)


class PaymentMethod(Enum):
    COD = "cod"
    ONLINE = "online"


@dataclass(frozen=True, slots=True)
class Contact:
    name: str = ""
    email: str = ""
    phone: str = ""


@dataclass(frozen=True, slots=True)
class GatewayOrderRef:
    """Descriptor of the order on the gateway's side. Amount is in minor units."""

    id: str
    amount: int
    currency: str = "INR"


@dataclass(frozen=True, slots=True)
class OrderRef:
    """
    The internal order captured at creation.

    `id` is the only identifier sent back to the storefront API; gateway
    identifiers travel in `gateway` and in the verify payload only.
    """

    id: OrderId
    number: str
    method: PaymentMethod
    contact: Contact
    gateway: GatewayOrderRef | None = None

    @classmethod
    def from_reply(cls, reply: CreateOrderReply, method: PaymentMethod) -> OrderRef | None:
        order = reply.order
        if order is None or not order.id:
            return None

        user = order.user
        address = order.shipping_address
        contact = Contact(
            name=(user.name if user else "") or (address.name if address else ""),
            email=(user.email if user else "") or (address.email if address else ""),
            phone=(address.phone if address else "") or (user.phone if user else ""),
        )
        gateway = None
        if reply.gateway_order is not None:
            g = reply.gateway_order
            gateway = GatewayOrderRef(g.id, g.amount, g.currency)
        return cls(order.id, order.order_number or order.id, method, contact, gateway)


@dataclass(frozen=True, slots=True)
class Receipt:
    order_id: OrderId
    method: PaymentMethod
    state: PaymentState


@dataclass(frozen=True, slots=True)
class PaymentStatus:
    order_id: OrderId
    payment_status: str | None
    order_status: str | None

    @classmethod
    def from_reply(cls, order_id: OrderId, reply: PaymentStatusReply) -> PaymentStatus:
        return cls(order_id, reply.payment_status, reply.status)


__all__ = (
    "PaymentState",
    "PaymentMethod",
    "Contact",
    "GatewayOrderRef",
    "OrderRef",
    "Receipt",
    "PaymentStatus",
)
