"""
Cart — server-synced line items.

    from storefront import cart as C

    manager = C.CartManager(api, gate, channel)
    await manager.fetch()
    await manager.add(C.ProductRef("p1", "Mug", 100))
    manager.total()
"""

from storefront.cart._types import ProductRef, CartLineItem, Cart, EMPTY_CART
from storefront.cart._manager import CartManager, CartListener

__all__ = (
    "ProductRef",
    "CartLineItem",
    "Cart",
    "EMPTY_CART",
    "CartManager",
    "CartListener",
)
