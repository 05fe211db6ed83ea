"""
Message types — what the buyer is told, as data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from storefront._errors import ErrorKind, StoreError


class Level(Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notice:
    """
    A transient user-facing message.

    topic: the resource that produced it ("cart", "wishlist", "payment", ...).
    kind: the error kind for failures, so presenters can style 429s apart.
    """

    level: Level
    text: str
    topic: str
    kind: ErrorKind | None = None
    at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def success(cls, topic: str, text: str) -> Notice:
        return cls(Level.SUCCESS, text, topic)

    @classmethod
    def info(cls, topic: str, text: str) -> Notice:
        return cls(Level.INFO, text, topic)

    @classmethod
    def failure(cls, topic: str, error: StoreError) -> Notice:
        return cls(Level.ERROR, error.message, topic, error.kind)


@dataclass(frozen=True, slots=True)
class RealtimeEvent:
    """
    An event pushed by the notification service.

    Delivery is at-least-once: the same id may arrive more than once.
    """

    id: str
    type: str
    payload: dict[str, Any] = field(default_factory=dict)


__all__ = ("Level", "Notice", "RealtimeEvent")
