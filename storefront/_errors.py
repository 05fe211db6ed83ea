"""
Error taxonomy — every failure in the pipeline is a StoreError value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


# ═══════════════════════════════════════════════════════════════════════════════
# Error Kind
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorKind(Enum):
    """Kinds of storefront errors."""

    AUTH_REQUIRED = auto()  # Mutating call attempted while signed out, no request made
    VALIDATION = auto()  # Coupon/address/session input rejected
    NETWORK = auto()  # No response from the API
    RATE_LIMITED = auto()  # HTTP 429
    VERIFICATION = auto()  # Gateway signature rejected, order stays unpaid
    CANCELLED = auto()  # Buyer dismissed the gateway widget
    SERVER = auto()  # 5xx or unclassified server failure
    SESSION_EXPIRED = auto()  # HTTP 401
    FORBIDDEN = auto()  # HTTP 403
    NOT_FOUND = auto()  # HTTP 404
    BUSY = auto()  # Rejected by a single-flight guard
    GATEWAY_UNAVAILABLE = auto()  # Gateway integration failed to load
    INVALID_RESPONSE = auto()  # Body did not match the expected shape


# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StoreError:
    """
    A failed storefront operation.

    status: HTTP status when the failure came from a response.
    redirect_to: portal hint carried by a 403 role-mismatch reply.
    """

    kind: ErrorKind
    message: str
    status: int | None = None
    redirect_to: str | None = None

    @property
    def retryable(self) -> bool:
        return self.kind in (
            ErrorKind.NETWORK,
            ErrorKind.RATE_LIMITED,
            ErrorKind.SERVER,
            ErrorKind.CANCELLED,
            ErrorKind.GATEWAY_UNAVAILABLE,
            ErrorKind.BUSY,
        )

    def __str__(self) -> str:
        return f"{self.kind.name}: {self.message}"


class Errors:
    @staticmethod
    def auth_required(message: str = "Please login to continue") -> StoreError:
        return StoreError(ErrorKind.AUTH_REQUIRED, message)

    @staticmethod
    def validation(message: str, status: int | None = None) -> StoreError:
        return StoreError(ErrorKind.VALIDATION, message, status)

    @staticmethod
    def network(message: str = "Network error. Please check your connection.") -> StoreError:
        return StoreError(ErrorKind.NETWORK, message)

    @staticmethod
    def rate_limited(message: str = "Too many requests. Please wait a moment.") -> StoreError:
        return StoreError(ErrorKind.RATE_LIMITED, message, 429)

    @staticmethod
    def verification(message: str = "Payment verification failed") -> StoreError:
        return StoreError(ErrorKind.VERIFICATION, message)

    @staticmethod
    def cancelled(message: str = "Payment cancelled") -> StoreError:
        return StoreError(ErrorKind.CANCELLED, message)

    @staticmethod
    def server(message: str = "Server error. Please try again later.", status: int | None = None) -> StoreError:
        return StoreError(ErrorKind.SERVER, message, status)

    @staticmethod
    def session_expired(message: str = "Session expired. Please login again.") -> StoreError:
        return StoreError(ErrorKind.SESSION_EXPIRED, message, 401)

    @staticmethod
    def forbidden(message: str = "You do not have permission", redirect_to: str | None = None) -> StoreError:
        return StoreError(ErrorKind.FORBIDDEN, message, 403, redirect_to)

    @staticmethod
    def not_found(message: str = "Resource not found") -> StoreError:
        return StoreError(ErrorKind.NOT_FOUND, message, 404)

    @staticmethod
    def busy(message: str = "Request already in progress") -> StoreError:
        return StoreError(ErrorKind.BUSY, message)

    @staticmethod
    def gateway_unavailable(message: str = "Failed to load payment gateway") -> StoreError:
        return StoreError(ErrorKind.GATEWAY_UNAVAILABLE, message)

    @staticmethod
    def invalid_response(message: str) -> StoreError:
        return StoreError(ErrorKind.INVALID_RESPONSE, message)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("ErrorKind", "StoreError", "Errors")
