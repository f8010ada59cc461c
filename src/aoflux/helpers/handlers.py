"""Inspect, add and invoke handlers registered inside a process."""

from __future__ import annotations

from typing import TYPE_CHECKING

from aoflux.helpers.lua import run_lua
from aoflux.network.models import Tag

if TYPE_CHECKING:
    from aoflux.bridge.correlator import Outcome
    from aoflux.context import FluxContext
    from aoflux.network.models import MessageResult

LIST_HANDLERS_CODE = """\
local names = {}
for _, handler in ipairs(Handlers.list) do
  table.insert(names, handler.name)
end
return require('json').encode(names)"""


async def list_handlers(ctx: FluxContext, process_id: str) -> MessageResult:
    """Return the names of the process's handlers (as a JSON array in Output)."""
    return await run_lua(ctx, LIST_HANDLERS_CODE, process_id)


async def add_handler(ctx: FluxContext, process_id: str, handler_code: str) -> MessageResult:
    """Evaluate handler registration code in the process."""
    return await run_lua(ctx, handler_code, process_id)


async def run_handler(
    ctx: FluxContext, process_id: str, handler_name: str, data: str
) -> Outcome:
    """Invoke a handler by sending a message whose ``Action`` is its name."""
    return await ctx.correlator.submit_and_await(
        process_id, data, [Tag("Action", handler_name)], ctx.signer
    )
