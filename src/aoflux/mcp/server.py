"""MCP server exposing the AO tool catalog."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from aoflux import __version__
from aoflux.core.errors import UnknownToolError, ValidationError

if TYPE_CHECKING:
    from aoflux.config.schema import FluxConfig
    from aoflux.context import FluxContext
    from aoflux.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

SERVER_NAME = "ao-mcp"


def _get_tools(registry: ToolRegistry) -> list[Tool]:
    """Describe the registered tools in MCP form."""
    return [
        Tool(name=spec.name, description=spec.description, inputSchema=spec.input_schema)
        for spec in registry.list_specs()
    ]


async def call_tool(
    registry: ToolRegistry, ctx: FluxContext, name: str, arguments: dict[str, Any] | None
) -> list[TextContent]:
    """Dispatch one call; every outcome, including bad input, comes back as text."""
    try:
        response = await registry.dispatch(name, arguments, ctx)
    except UnknownToolError:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]
    except ValidationError as e:
        logger.info("Rejected %s call: %s", name, e)
        return [TextContent(type="text", text=str(e))]
    return response.content


def create_server(registry: ToolRegistry, ctx: FluxContext) -> Server:
    """Build an MCP server bound to one registry and context."""
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()  # type: ignore[no-untyped-call, untyped-decorator]
    async def list_tools() -> list[Tool]:
        """List available MCP tools."""
        return _get_tools(registry)

    @server.call_tool()  # type: ignore[untyped-decorator]
    async def handle_call_tool(name: str, arguments: dict) -> list[TextContent]:  # type: ignore[type-arg]
        """Handle tool calls."""
        return await call_tool(registry, ctx, name, arguments)

    return server


async def run_server(config: FluxConfig) -> None:
    """Start the MCP server on stdio."""
    from aoflux.context import FluxContext
    from aoflux.tools import default_registry

    async with FluxContext.create(config) as ctx:
        server = create_server(default_registry(), ctx)
        logger.info("MCP stdio server ready (wallet %s)", ctx.signer.address)
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
