"""
Transport — HTTP client + global interceptor.

    from storefront import transport as T

    api = T.Api(settings, T.Interceptor(session, navigator, channel, settings))
"""

from storefront.transport._interceptor import Interceptor
from storefront.transport._client import Api, IDEMPOTENCY_HEADER, new_key

__all__ = ("Interceptor", "Api", "IDEMPOTENCY_HEADER", "new_key")
