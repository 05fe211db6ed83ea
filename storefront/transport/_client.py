"""
Api — the HTTP client every component talks through.

Every method returns a lazy computation (nothing is sent until awaited)
that yields Result[Reply, StoreError]. Mutating methods always send an
Idempotency-Key header: the caller's key when given, a fresh one otherwise.
"""

from __future__ import annotations

import uuid
from typing import Any

import httpx
import structlog
from combinators import flow, lift as L
from kungfu import Error, Ok, Result
from pydantic import BaseModel, ValidationError

from storefront._config import Settings
from storefront._errors import Errors, StoreError
from storefront._types import Lazy
from storefront.transport._interceptor import Interceptor
from storefront.wire import Body, Reply

logger = structlog.get_logger(__name__)

IDEMPOTENCY_HEADER = "Idempotency-Key"


def new_key() -> str:
    """Client-generated idempotency key."""
    return uuid.uuid4().hex


class Api:
    """
    Thin async REST client over httpx.

    Example:
        api = Api(settings, interceptor)
        result = await api.get("/cart", W.CartReply)
        result = await api.post("/cart/add", W.CartReply, W.CartMutation(product_id="p1", quantity=1))
    """

    def __init__(
        self,
        settings: Settings,
        interceptor: Interceptor,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._interceptor = interceptor
        self._client = client or httpx.AsyncClient(
            base_url=settings.api_url,
            timeout=settings.request_timeout.total_seconds(),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    # ─────────────────────────────────────────────────────────────────────────
    # Verbs
    # ─────────────────────────────────────────────────────────────────────────

    def get[M: Reply](self, path: str, reply: type[M]) -> Lazy[M, StoreError]:
        return self._call("GET", path, reply)

    def post[M: Reply](
        self, path: str, reply: type[M], body: Body | None = None, *, key: str | None = None
    ) -> Lazy[M, StoreError]:
        return self._call("POST", path, reply, body, key)

    def put[M: Reply](
        self, path: str, reply: type[M], body: Body | None = None, *, key: str | None = None
    ) -> Lazy[M, StoreError]:
        return self._call("PUT", path, reply, body, key)

    def delete[M: Reply](self, path: str, reply: type[M], *, key: str | None = None) -> Lazy[M, StoreError]:
        return self._call("DELETE", path, reply, None, key)

    async def aclose(self) -> None:
        await self._client.aclose()

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _call[M: Reply](
        self,
        method: str,
        path: str,
        reply: type[M],
        body: Body | None = None,
        key: str | None = None,
    ) -> Lazy[M, StoreError]:
        headers: dict[str, str] = {}
        if method != "GET":
            headers[IDEMPOTENCY_HEADER] = key or new_key()
        payload: dict[str, Any] | None = body.dump() if body is not None else None

        return (
            flow(
                L.catching_async(
                    lambda: self._client.request(method, path, json=payload, headers=headers),
                    on_error=self._interceptor.transport_error,
                )
            )
            .then(lambda response: L.from_result(self._decode(response, reply)))
            .compile()
        )

    def _decode[M: BaseModel](self, response: httpx.Response, reply: type[M]) -> Result[M, StoreError]:
        if response.is_error:
            return Error(self._interceptor.status_error(response))

        try:
            parsed = reply.model_validate(response.json())
        except ValueError as exc:
            # pydantic's ValidationError is a ValueError, so is a JSON decode error
            logger.warning(
                "response_unreadable",
                path=response.request.url.path,
                errors=exc.errors() if isinstance(exc, ValidationError) else str(exc),
            )
            return Error(Errors.invalid_response(f"Unexpected response from {response.request.url.path}"))

        if isinstance(parsed, Reply) and not parsed.success:
            return Error(Errors.server(parsed.message or "Request failed", response.status_code))
        return Ok(parsed)


__all__ = ("Api", "IDEMPOTENCY_HEADER", "new_key")
