"""
Graph runner — composes a target node over nodnod with injected inputs.
"""

from __future__ import annotations

from typing import Any, cast

from nodnod import EventLoopAgent, Node, Scope, Value


async def compose[T](target: type[T], *inputs: object) -> T:
    """
    Build `target` and every node it depends on. Each input is injected
    under its runtime type.

    Example:
        node = await compose(SessionNode, checkout_input, settings)
    """
    agent = EventLoopAgent.build({cast(type[Node[Any, Any]], target)})

    scope = Scope(detail="checkout")
    async with scope:
        for value in inputs:
            scope.push(Value(type(value), value))
        await agent.run(scope, {})
        built = scope.get(target)

    if built is None:
        raise LookupError(f"{target.__name__} was not composed")
    return cast(T, built.value)


__all__ = ("compose",)
