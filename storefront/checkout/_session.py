"""
CheckoutSession — the hand-off from checkout to payment.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from storefront._types import Amount

SESSION_STATE_KEY = "checkout_session"


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    """
    Immutable pricing snapshot taken when the buyer leaves checkout.

    idempotency_key is sent with order creation, so replaying the same
    session can never create a second order server-side.
    """

    address_id: str
    subtotal: Amount
    discount: Amount
    shipping: Amount
    total: Amount
    coupon_code: str | None
    idempotency_key: str

    def as_state(self) -> dict[str, Any]:
        """Navigation state carrying this session to the payment page."""
        return {SESSION_STATE_KEY: self}

    @classmethod
    def from_state(cls, state: Mapping[str, Any] | None) -> CheckoutSession | None:
        if not state:
            return None
        session = state.get(SESSION_STATE_KEY)
        return session if isinstance(session, cls) else None


__all__ = ("CheckoutSession", "SESSION_STATE_KEY")
