"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine

import httpx

from storefront import Settings
from storefront.messages import Channel, Level, Notice
from examples.shop_backend import ShopState, create_app

_MARKS = {Level.SUCCESS: "✓", Level.INFO: "·", Level.ERROR: "✗"}


def local_backend(state: ShopState | None = None) -> tuple[ShopState, httpx.ASGITransport, Settings]:
    """In-process shop API: state, a transport that reaches it, settings pointing at it."""
    state = state if state is not None else ShopState.seeded()
    transport = httpx.ASGITransport(app=create_app(state))
    settings = Settings().with_api_url("http://shop.local/api").with_gateway(key="rzp_test_demo")
    return state, transport, settings


def print_notices(channel: Channel) -> None:
    def show(notice: Notice) -> None:
        print(f"   {_MARKS[notice.level]} [{notice.topic}] {notice.text}")

    channel.subscribe(show)


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
