"""Package installation through the AO package manager (APM)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from aoflux.helpers.blueprint import fetch_blueprint_code
from aoflux.helpers.lua import lua_string, run_lua

if TYPE_CHECKING:
    from aoflux.context import FluxContext
    from aoflux.network.models import MessageResult


def install_code(client_code: str, package_name: str) -> str:
    """Lua that loads the APM client when missing, then installs a package."""
    return (
        "if not apm then\n"
        f"{client_code}\n"
        "end\n"
        f"apm.install({lua_string(package_name)})"
    )


async def install_package(
    ctx: FluxContext, package_name: str, process_id: str
) -> MessageResult:
    """Install an APM package into the process."""
    client_code = await fetch_blueprint_code(ctx, ctx.config.blueprints.apm_client_url)
    return await run_lua(ctx, install_code(client_code, package_name), process_id)
