"""Blueprint loading: fetch Lua bundles and evaluate them in a process."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

import httpx

from aoflux.core.errors import BlueprintError
from aoflux.helpers.lua import run_lua

if TYPE_CHECKING:
    from aoflux.context import FluxContext
    from aoflux.network.models import MessageResult

logger = logging.getLogger(__name__)

_BLUEPRINT_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


async def fetch_blueprint_code(ctx: FluxContext, url: str) -> str:
    """Download blueprint source text.

    Raises:
        BlueprintError: On transport failure or a non-2xx response.
    """
    try:
        resp = await ctx.http.get(url)
    except httpx.HTTPError as e:
        raise BlueprintError(url, str(e)) from e
    if resp.status_code >= 400:
        raise BlueprintError(url, f"HTTP {resp.status_code}")
    logger.debug("Fetched blueprint %s (%d bytes)", url, len(resp.content))
    return resp.text


def official_blueprint_url(ctx: FluxContext, name: str) -> str:
    if not _BLUEPRINT_NAME_RE.match(name):
        raise BlueprintError(name, "blueprint names may only contain letters, digits, '-' and '_'")
    return f"{ctx.config.blueprints.base_url.rstrip('/')}/{name}.lua"


async def load_blueprint(ctx: FluxContext, url: str, process_id: str) -> MessageResult:
    """Fetch a blueprint by URL and evaluate it in the process."""
    code = await fetch_blueprint_code(ctx, url)
    return await run_lua(ctx, code, process_id)


async def add_blueprint(ctx: FluxContext, name: str, process_id: str) -> MessageResult:
    """Load an official blueprint (e.g. ``token``) into the process."""
    return await load_blueprint(ctx, official_blueprint_url(ctx, name), process_id)
