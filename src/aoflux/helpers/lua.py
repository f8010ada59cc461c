"""Evaluate Lua inside a process via ``Action: Eval`` messages."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from aoflux.network.models import Tag, coerce_tags

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from aoflux.context import FluxContext
    from aoflux.network.models import MessageResult

_LUA_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\0": "\\0",
}


def lua_string(value: str) -> str:
    """Quote a Python string as a Lua double-quoted string literal."""
    return '"' + "".join(_LUA_ESCAPES.get(ch, ch) for ch in value) + '"'


async def run_lua(
    ctx: FluxContext,
    code: str,
    process_id: str,
    tags: Iterable[Tag | Mapping[str, Any]] | None = None,
) -> MessageResult:
    """Evaluate ``code`` in the process and return the settled result."""
    eval_tags = [Tag("Action", "Eval"), *coerce_tags(tags)]
    _, result = await ctx.correlator.submit_and_collect(
        process_id, code, eval_tags, ctx.signer
    )
    return result
