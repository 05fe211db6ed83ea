"""
Wishlist — product set with a single-flight toggle.

    from storefront import wishlist as WL

    guard = WL.WishlistGuard(api, gate, channel)
    await guard.toggle(product)
"""

from storefront.wishlist._guard import WishlistGuard, ToggleOutcome

__all__ = ("WishlistGuard", "ToggleOutcome")
