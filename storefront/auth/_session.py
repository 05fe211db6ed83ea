"""
Session — who is signed in, where to go, where to come back to.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import structlog

logger = structlog.get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Buyer / Session
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Buyer:
    id: str
    name: str = ""
    email: str = ""
    phone: str = ""


type SessionListener = Callable[[Buyer | None], None]


class Session:
    """
    The signed-in buyer, if any.

    Credentials themselves live in the HTTP client's cookie jar; this only
    tracks identity for gating and prefill.
    """

    def __init__(self, buyer: Buyer | None = None) -> None:
        self._buyer = buyer
        self._listeners: list[SessionListener] = []

    @property
    def buyer(self) -> Buyer | None:
        return self._buyer

    @property
    def authenticated(self) -> bool:
        return self._buyer is not None

    def on_change(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def login(self, buyer: Buyer) -> None:
        self._buyer = buyer
        logger.info("session_started", buyer_id=buyer.id)
        self._emit()

    def logout(self) -> None:
        if self._buyer is None:
            return
        logger.info("session_ended", buyer_id=self._buyer.id)
        self._buyer = None
        self._emit()

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self._buyer)


# ═══════════════════════════════════════════════════════════════════════════════
# Navigator
# ═══════════════════════════════════════════════════════════════════════════════


class Navigator(Protocol):
    """Where the buyer goes next. Routing itself is the host's concern."""

    @property
    def current_path(self) -> str: ...

    @property
    def current_state(self) -> Mapping[str, Any] | None:
        """State passed along with the navigation that led to the current path."""
        ...

    def go(self, path: str, state: Mapping[str, Any] | None = None) -> None: ...


@dataclass(frozen=True, slots=True)
class Visit:
    path: str
    state: Mapping[str, Any] | None = None


@dataclass(slots=True)
class MemoryNavigator:
    """Navigator that records visits. Used by headless clients and tests."""

    start: str = "/"
    visits: list[Visit] = field(default_factory=list[Visit])

    @property
    def current_path(self) -> str:
        return self.visits[-1].path if self.visits else self.start

    @property
    def current(self) -> Visit | None:
        return self.visits[-1] if self.visits else None

    @property
    def current_state(self) -> Mapping[str, Any] | None:
        return self.visits[-1].state if self.visits else None

    def go(self, path: str, state: Mapping[str, Any] | None = None) -> None:
        self.visits.append(Visit(path, dict(state) if state is not None else None))


# ═══════════════════════════════════════════════════════════════════════════════
# Resume Slot
# ═══════════════════════════════════════════════════════════════════════════════


class ResumeSlot(Protocol):
    def put(self, path: str) -> None: ...

    def take(self) -> str | None: ...


@dataclass(slots=True)
class MemorySlot:
    path: str | None = None

    def put(self, path: str) -> None:
        self.path = path

    def take(self) -> str | None:
        path, self.path = self.path, None
        return path


__all__ = (
    "Buyer",
    "Session",
    "SessionListener",
    "Navigator",
    "Visit",
    "MemoryNavigator",
    "ResumeSlot",
    "MemorySlot",
)
