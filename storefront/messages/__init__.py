"""
Messages — structured feedback instead of ad-hoc toasts.

    from storefront import messages as M

    channel = M.Channel()
    channel.subscribe(render)
    channel.publish(M.Notice.success("cart", "Added to cart successfully!"))
"""

from storefront.messages._types import Level, Notice, RealtimeEvent
from storefront.messages._channel import Channel, Inbox, Listener, Unsubscribe

__all__ = (
    "Level",
    "Notice",
    "RealtimeEvent",
    "Channel",
    "Inbox",
    "Listener",
    "Unsubscribe",
)
