"""
Auth — the gate in front of every mutating call.

    from storefront import auth as A

    gate = A.AuthGate(A.Session(), A.MemorySlot(), navigator, channel, settings)
"""

from storefront.auth._session import (
    Buyer,
    Session,
    SessionListener,
    Navigator,
    Visit,
    MemoryNavigator,
    ResumeSlot,
    MemorySlot,
)
from storefront.auth._gate import AuthGate

__all__ = (
    "Buyer",
    "Session",
    "SessionListener",
    "Navigator",
    "Visit",
    "MemoryNavigator",
    "ResumeSlot",
    "MemorySlot",
    "AuthGate",
)
