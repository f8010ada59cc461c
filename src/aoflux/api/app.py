"""FastAPI application serving the MCP tools over SSE."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from mcp.server.sse import SseServerTransport

from aoflux import __version__

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from aoflux.config.schema import FluxConfig
    from aoflux.context import FluxContext

logger = logging.getLogger(__name__)

MESSAGE_PATH = "/messages/"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the shared context and MCP server on startup, close on shutdown."""
    from aoflux.context import FluxContext
    from aoflux.mcp.server import create_server
    from aoflux.tools import default_registry

    ctx: FluxContext | None = app.state.context
    owns_context = ctx is None
    if ctx is None:
        ctx = FluxContext.create(app.state.config)
        app.state.context = ctx

    app.state.mcp_server = create_server(default_registry(), ctx)
    logger.info("Flux server ready (wallet %s)", ctx.signer.address)

    yield

    if owns_context:
        await ctx.aclose()


def create_app(
    config: FluxConfig | None = None, *, context: FluxContext | None = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Pass ``context`` to reuse an existing :class:`FluxContext`; otherwise
    one is built from ``config`` during startup.
    """
    from aoflux.config.loader import load_config

    if config is None:
        config = context.config if context is not None else load_config()

    app = FastAPI(
        title="aoflux",
        description="MCP tools for AO processes",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.context = context
    app.state.mcp_server = None

    from fastapi.middleware.cors import CORSMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    sse = SseServerTransport(MESSAGE_PATH)

    async def handle_sse(request: Request) -> Response:
        server = request.app.state.mcp_server
        if server is None:
            return JSONResponse({"error": "Server not initialized"}, status_code=503)
        async with sse.connect_sse(
            request.scope, request.receive, request._send
        ) as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
        return Response()

    app.add_route("/sse", handle_sse, methods=["GET"])
    app.mount(MESSAGE_PATH, app=sse.handle_post_message)

    from aoflux.api.health import router as health_router

    app.include_router(health_router)

    return app
