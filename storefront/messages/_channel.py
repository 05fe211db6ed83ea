"""
Channel — publish/subscribe for notices, and a de-duplicating inbox for
realtime events.
"""

from __future__ import annotations

from collections import OrderedDict, deque
from collections.abc import Callable

import structlog

from storefront._errors import ErrorKind, StoreError
from storefront.messages._types import Level, Notice, RealtimeEvent

logger = structlog.get_logger(__name__)

type Listener[T] = Callable[[T], None]
type Unsubscribe = Callable[[], None]

_ANNOUNCED = frozenset({ErrorKind.AUTH_REQUIRED, ErrorKind.SESSION_EXPIRED, ErrorKind.BUSY})
_SPECIFIC = frozenset({ErrorKind.VALIDATION, ErrorKind.NOT_FOUND, ErrorKind.RATE_LIMITED, ErrorKind.NETWORK})


# ═══════════════════════════════════════════════════════════════════════════════
# Channel
# ═══════════════════════════════════════════════════════════════════════════════


class Channel:
    """
    Decouples business logic from presentation.

    Components publish Notice values; presenters subscribe. A bounded
    history lets late subscribers (and tests) see what was published.

    Example:
        channel = Channel()
        stop = channel.subscribe(lambda n: toast(n.level.value, n.text))
        channel.publish(Notice.success("cart", "Added to cart successfully!"))
        stop()
    """

    def __init__(self, history: int = 50) -> None:
        self._listeners: list[Listener[Notice]] = []
        self._history: deque[Notice] = deque(maxlen=history)

    def subscribe(self, listener: Listener[Notice]) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, notice: Notice) -> None:
        self._history.append(notice)
        for listener in list(self._listeners):
            try:
                listener(notice)
            except Exception:
                logger.exception("notice_listener_failed", topic=notice.topic)

    def fail(self, topic: str, error: StoreError, fallback: str | None = None) -> None:
        """
        Publish a failure notice for `error`.

        Errors already announced elsewhere (gate, interceptor) and single-flight
        rejections are not republished. Generic failures use `fallback` text;
        specific ones (validation, 404, 429, network) keep the error's message.
        """
        if error.kind in _ANNOUNCED or (error.kind is ErrorKind.FORBIDDEN and error.redirect_to):
            return
        text = error.message if fallback is None or error.kind in _SPECIFIC else fallback
        self.publish(Notice(Level.ERROR, text, topic, error.kind))

    @property
    def history(self) -> tuple[Notice, ...]:
        return tuple(self._history)

    def last(self, topic: str | None = None) -> Notice | None:
        for notice in reversed(self._history):
            if topic is None or notice.topic == topic:
                return notice
        return None


# ═══════════════════════════════════════════════════════════════════════════════
# Inbox
# ═══════════════════════════════════════════════════════════════════════════════


class Inbox:
    """
    Consumes realtime events, dropping redeliveries by id.

    Remembers the last `window` ids; an id older than the window is treated
    as new again.
    """

    def __init__(self, window: int = 500) -> None:
        self._seen: OrderedDict[str, None] = OrderedDict()
        self._window = window
        self._handlers: list[Listener[RealtimeEvent]] = []

    def on_event(self, handler: Listener[RealtimeEvent]) -> None:
        self._handlers.append(handler)

    def accept(self, event: RealtimeEvent) -> bool:
        """Deliver to handlers unless already seen. Returns True if delivered."""
        if event.id in self._seen:
            self._seen.move_to_end(event.id)
            logger.debug("realtime_event_duplicate", event_id=event.id, type=event.type)
            return False

        self._seen[event.id] = None
        if len(self._seen) > self._window:
            self._seen.popitem(last=False)

        for handler in list(self._handlers):
            handler(event)
        return True

    def __len__(self) -> int:
        return len(self._seen)


__all__ = ("Channel", "Inbox", "Listener", "Unsubscribe")
