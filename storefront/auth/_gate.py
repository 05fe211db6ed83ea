"""
AuthGate — blocks mutating actions for signed-out buyers.
"""

from __future__ import annotations

import structlog
from kungfu import Error, Ok, Result

from storefront._config import Settings
from storefront._errors import Errors, StoreError
from storefront.auth._session import Navigator, ResumeSlot, Session
from storefront.messages import Channel, Notice

logger = structlog.get_logger(__name__)


class AuthGate:
    """
    Consulted by cart, wishlist and payment before any mutating call.

    Example:
        match gate.require("/products/42", "Please login to add items to cart"):
            case Error(e):
                return Error(e)   # redirected, nothing sent
            case Ok(_):
                ...

        # after login
        navigator.go(gate.resume())
    """

    def __init__(
        self,
        session: Session,
        slot: ResumeSlot,
        navigator: Navigator,
        channel: Channel,
        settings: Settings,
    ) -> None:
        self._session = session
        self._slot = slot
        self._navigator = navigator
        self._channel = channel
        self._settings = settings

    @property
    def session(self) -> Session:
        return self._session

    def require(self, path: str | None = None, message: str = "Please login to continue") -> Result[None, StoreError]:
        """
        Pass when signed in. Otherwise remember `path` (default: the current
        path), redirect to login and fail with AUTH_REQUIRED.
        """
        if self._session.authenticated:
            return Ok(None)

        resume_to = path if path is not None else self._navigator.current_path
        self._slot.put(resume_to)
        error = Errors.auth_required(message)
        self._channel.publish(Notice.failure("auth", error))
        logger.info("auth_required", resume_to=resume_to)
        self._navigator.go(self._settings.login_path)
        return Error(error)

    def resume(self, default: str | None = None) -> str:
        """Read and clear the saved destination; fall back to `default`."""
        saved = self._slot.take()
        return saved if saved else (default or self._settings.default_destination)


__all__ = ("AuthGate",)
