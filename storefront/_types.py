"""
Core types for storefront.

Re-exports from kungfu + shared aliases.
"""

from __future__ import annotations

from enum import Enum

from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail. Nothing runs until awaited."""

# ═══════════════════════════════════════════════════════════════════════════════
# Identity & Money
# ═══════════════════════════════════════════════════════════════════════════════

type ProductId = str
"""Server-side product identifier (Mongo-style `_id`)."""

type OrderId = str
"""Internal order identifier. Never a gateway identifier."""

type Amount = float
"""Money in the store currency's major unit (the API speaks rupees, not paise)."""

# ═══════════════════════════════════════════════════════════════════════════════
# Resource State
# ═══════════════════════════════════════════════════════════════════════════════


class ResourceState(Enum):
    """
    Per-resource request state.

        IDLE    → nothing outstanding
        LOADING → at least one request in flight
        ERROR   → last settled request failed (next request moves back to LOADING)
    """

    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    "Lazy",
    "ProductId",
    "OrderId",
    "Amount",
    "ResourceState",
)
