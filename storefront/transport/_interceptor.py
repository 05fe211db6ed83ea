"""
Interceptor — global response handling shared by every call.

Maps transport failures and HTTP statuses onto StoreError. Session expiry
(401) and role mismatch (403 + redirectTo) are handled here once, so the
core components never special-case them.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from storefront._config import Settings
from storefront._errors import Errors, StoreError
from storefront.auth import Navigator, Session
from storefront.messages import Channel, Notice

logger = structlog.get_logger(__name__)


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class Interceptor:
    def __init__(
        self,
        session: Session,
        navigator: Navigator,
        channel: Channel,
        settings: Settings,
    ) -> None:
        self._session = session
        self._navigator = navigator
        self._channel = channel
        self._settings = settings

    def transport_error(self, exc: Exception) -> StoreError:
        """No usable response at all."""
        if isinstance(exc, httpx.TimeoutException):
            logger.warning("request_timeout", error=str(exc))
            return Errors.network("Request timed out. Please try again.")
        if isinstance(exc, httpx.HTTPError):
            logger.warning("request_failed", error=str(exc))
            return Errors.network()
        logger.error("request_crashed", error=repr(exc))
        return Errors.server("An unexpected error occurred")

    def status_error(self, response: httpx.Response) -> StoreError:
        status = response.status_code
        data = _json_or_empty(response)
        message = data.get("message")
        logger.info("request_rejected", status=status, path=response.request.url.path, message=message)

        match status:
            case 401:
                error = Errors.session_expired()
                self._session.logout()
                self._channel.publish(Notice.failure("session", error))
                self._navigator.go(self._settings.login_path)
                return error
            case 403:
                redirect_to = data.get("redirectTo")
                error = Errors.forbidden(message or ("Access denied" if redirect_to else "You do not have permission"), redirect_to)
                if redirect_to:
                    self._channel.publish(Notice.failure("session", error))
                    self._navigator.go(redirect_to)
                return error
            case 404:
                return Errors.not_found(message or "Resource not found")
            case 429:
                return Errors.rate_limited()
            case 400 | 409 | 422:
                return Errors.validation(message or "Request was rejected", status)
            case _ if status >= 500:
                return Errors.server(status=status)
            case _:
                return Errors.server(message or "Something went wrong", status)


__all__ = ("Interceptor",)
