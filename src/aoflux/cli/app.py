"""Main CLI application.

Click commands for aoflux: serve, mcp, tools, call, wallet.
"""

from __future__ import annotations

import asyncio
import json as json_mod
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from aoflux import __version__
from aoflux.config.loader import load_config
from aoflux.core.errors import ConfigError, FluxError

if TYPE_CHECKING:
    from aoflux.config.schema import FluxConfig, LoggingConfig


# ── Helpers ──────────────────────────────────────────────────────


def _error(msg: str) -> None:
    """Print an error message to stderr and exit."""
    click.echo(f"Error: {msg}", err=True)
    sys.exit(1)


def _load_config(config_path: str | None) -> FluxConfig:
    """Load config with user-friendly error handling."""
    try:
        return load_config(path=config_path)
    except ConfigError as e:
        _error(str(e))
        raise  # unreachable, keeps mypy happy


def setup_logging(config: LoggingConfig) -> None:
    """Configure root logging from config. Logs go to stderr (stdout is MCP's)."""
    level = getattr(logging, config.level.upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        path = Path(config.file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


async def _call_tool(config: FluxConfig, name: str, arguments: dict[str, Any]) -> tuple[str, bool]:
    """Run one tool through the registry; return (text, is_error)."""
    from aoflux.context import FluxContext
    from aoflux.tools import default_registry

    registry = default_registry()
    async with FluxContext.create(config) as ctx:
        response = await registry.dispatch(name, arguments, ctx)
    return response.text_content, response.is_error


# ── CLI group ────────────────────────────────────────────────────


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="aoflux")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Path to config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """aoflux - MCP tools for AO processes.

    Spawn processes, send them messages, and read their results.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ── serve ────────────────────────────────────────────────────────


@cli.command()
@click.option("--host", default=None, help="Host to bind to (overrides config).")
@click.option(
    "--port", type=int, default=None, help="Port to bind to (overrides config)."
)
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Start the MCP server over HTTP/SSE."""
    import uvicorn

    from aoflux.api.app import create_app

    config = _load_config(ctx.obj["config_path"])
    setup_logging(config.logging)

    effective_host = host or config.server.host
    effective_port = port or config.server.port

    click.echo(f"Flux server running on http://{effective_host}:{effective_port}", err=True)
    uvicorn.run(create_app(config), host=effective_host, port=effective_port)


# ── mcp ─────────────────────────────────────────────────────────


@cli.command()
@click.pass_context
def mcp(ctx: click.Context) -> None:
    """Start the MCP server on stdio."""
    from aoflux.mcp.server import run_server

    config = _load_config(ctx.obj["config_path"])
    setup_logging(config.logging)
    asyncio.run(run_server(config))


# ── tools ───────────────────────────────────────────────────────


@cli.command()
def tools() -> None:
    """List the available tools."""
    from aoflux.cli.display import ToolDisplay
    from aoflux.tools import default_registry

    ToolDisplay().show_tools(default_registry().list_specs())


# ── call ────────────────────────────────────────────────────────


@cli.command()
@click.argument("name")
@click.argument("arguments", default="{}")
@click.option("--raw", is_flag=True, default=False, help="Print the result text only.")
@click.pass_context
def call(ctx: click.Context, name: str, arguments: str, raw: bool) -> None:
    """Invoke one tool with a JSON object of ARGUMENTS."""
    try:
        parsed = json_mod.loads(arguments)
    except json_mod.JSONDecodeError as e:
        _error(f"ARGUMENTS is not valid JSON: {e}")
        return
    if not isinstance(parsed, dict):
        _error("ARGUMENTS must be a JSON object")
        return

    config = _load_config(ctx.obj["config_path"])
    setup_logging(config.logging)
    try:
        text, is_error = asyncio.run(_call_tool(config, name, parsed))
    except FluxError as e:
        _error(str(e))
        return

    if raw:
        click.echo(text)
    else:
        from aoflux.cli.display import ToolDisplay

        ToolDisplay().show_result(name, text, is_error=is_error)
    if is_error:
        sys.exit(1)


# ── wallet ──────────────────────────────────────────────────────


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing file.")
def wallet(path: str, force: bool) -> None:
    """Generate a new wallet and write it to PATH as a JWK file."""
    from aoflux.signing.signer import Signer

    target = Path(path).expanduser()
    if target.exists() and not force:
        _error(f"{target} already exists (use --force to overwrite)")
        return
    signer = Signer.generate()
    target.write_text(json_mod.dumps(signer.to_jwk()), encoding="utf-8")
    target.chmod(0o600)
    click.echo(signer.address)
