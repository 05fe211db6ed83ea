"""
Shop Backend — deterministic in-memory storefront API.

Used by the test suite (through httpx.ASGITransport) and by the checkout
demo. Not a real server: one buyer, sequential ids, scripted failures.

Structure:
    store.py — ShopState (catalogue, cart, orders, test controls), sign()
    app.py   — create_app(state): FastAPI routes under /api
"""

from examples.shop_backend.store import ShopState, sign
from examples.shop_backend.app import create_app

__all__ = ("ShopState", "sign", "create_app")
