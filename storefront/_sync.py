"""
Sync — request bookkeeping for server-synced resources.

Every resource (cart, wishlist, payment) owns one Tracker. The tracker
replaces the advisory "loading" flag with an explicit ResourceState and
decides, per SyncPolicy, whether an overlapping call may start and whether
a settled response may still be applied to local state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto

import structlog
from kungfu import Error, Ok, Result

from storefront._errors import Errors, StoreError
from storefront._types import Lazy, ResourceState

logger = structlog.get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Policy
# ═══════════════════════════════════════════════════════════════════════════════


class OnBusy(Enum):
    """
    What to do when a call arrives while another is in flight.

    ALLOW:  Start it anyway. Duplicate requests are possible.
    REJECT: Return BUSY without touching the network (single-flight).
    """

    ALLOW = auto()
    REJECT = auto()


class Ordering(Enum):
    """
    Which settled responses are applied to local state.

    LAST_RESPONSE:  Every successful response replaces local state, so a slow
                    response for an older call can overwrite a newer view
                    until the next fetch.
    LATEST_REQUEST: A response is dropped once a response for a newer call
                    has been applied.
    """

    LAST_RESPONSE = auto()
    LATEST_REQUEST = auto()


ALLOW = OnBusy.ALLOW
REJECT = OnBusy.REJECT
LAST_RESPONSE = Ordering.LAST_RESPONSE
LATEST_REQUEST = Ordering.LATEST_REQUEST


@dataclass(frozen=True, slots=True)
class SyncPolicy:
    """
    Concurrency rules for one resource.

    Example:
        policy = SyncPolicy().with_on_busy(REJECT).with_ordering(LATEST_REQUEST)
    """

    on_busy: OnBusy = OnBusy.ALLOW
    ordering: Ordering = Ordering.LAST_RESPONSE

    def with_on_busy(self, strategy: OnBusy) -> SyncPolicy:
        return replace(self, on_busy=strategy)

    def with_ordering(self, ordering: Ordering) -> SyncPolicy:
        return replace(self, ordering=ordering)

    @classmethod
    def single_flight(cls) -> SyncPolicy:
        return cls(on_busy=OnBusy.REJECT)


# ═══════════════════════════════════════════════════════════════════════════════
# Ticket / Settled
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Ticket:
    """Issued for every started call, in issue order."""

    seq: int


@dataclass(frozen=True, slots=True)
class Settled[T]:
    """
    A successful response.

    applied=False means the tracker was closed or the response was superseded:
    the caller must not write `value` into local state.
    """

    value: T
    applied: bool


# ═══════════════════════════════════════════════════════════════════════════════
# Tracker
# ═══════════════════════════════════════════════════════════════════════════════


class Tracker:
    """Request state for one resource."""

    __slots__ = ("name", "policy", "_in_flight", "_issued", "_applied", "_state", "_last_error", "_closed")

    def __init__(self, name: str, policy: SyncPolicy | None = None) -> None:
        self.name = name
        self.policy = policy if policy is not None else SyncPolicy()
        self._in_flight = 0
        self._issued = 0
        self._applied = 0
        self._state = ResourceState.IDLE
        self._last_error: StoreError | None = None
        self._closed = False

    @property
    def state(self) -> ResourceState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._in_flight > 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def last_error(self) -> StoreError | None:
        return self._last_error

    @property
    def closed(self) -> bool:
        return self._closed

    def begin(self) -> Result[Ticket, StoreError]:
        if self._closed:
            return Error(Errors.busy(f"{self.name} is closed"))
        if self._in_flight and self.policy.on_busy is OnBusy.REJECT:
            logger.debug("request_rejected_busy", resource=self.name)
            return Error(Errors.busy())

        self._issued += 1
        self._in_flight += 1
        self._state = ResourceState.LOADING
        return Ok(Ticket(self._issued))

    def settle(self, ticket: Ticket, error: StoreError | None = None) -> bool:
        """Finish a call. Returns True when a successful response may be applied."""
        self._in_flight -= 1

        if error is not None:
            self._last_error = error
            if not self._in_flight:
                self._state = ResourceState.ERROR
            return False

        if not self._in_flight:
            self._state = ResourceState.IDLE

        if self._closed:
            logger.debug("response_discarded_closed", resource=self.name, seq=ticket.seq)
            return False

        if self.policy.ordering is Ordering.LATEST_REQUEST and ticket.seq < self._applied:
            logger.debug("response_discarded_superseded", resource=self.name, seq=ticket.seq)
            return False

        self._applied = max(self._applied, ticket.seq)
        return True

    async def run[T](self, action: Lazy[T, StoreError]) -> Result[Settled[T], StoreError]:
        """
        Begin, await the action, settle.

        Example:
            result = await tracker.run(api.get("/cart"))
            match result:
                case Ok(Settled(body, applied=True)):
                    replace_local_state(body)
        """
        match self.begin():
            case Error(e):
                return Error(e)
            case Ok(ticket):
                pass

        try:
            result = await action
        except BaseException:
            self.settle(ticket, Errors.server("request aborted"))
            raise

        match result:
            case Ok(value):
                return Ok(Settled(value, self.settle(ticket)))
            case Error(e):
                self.settle(ticket, e)
                return Error(e)

    def close(self) -> None:
        """Tear down: responses settling after this are never applied."""
        self._closed = True


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "OnBusy",
    "Ordering",
    "ALLOW",
    "REJECT",
    "LAST_RESPONSE",
    "LATEST_REQUEST",
    "SyncPolicy",
    "Ticket",
    "Settled",
    "Tracker",
)
