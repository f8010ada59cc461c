"""The AO tool catalog exposed to MCP callers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from aoflux.bridge.correlator import Failure, OutcomeKind, Success
from aoflux.bridge.normalize import normalize
from aoflux.helpers import (
    add_blueprint,
    add_handler,
    install_package,
    list_handlers,
    load_blueprint,
    run_handler,
    run_lua,
)
from aoflux.network.models import ModuleVariant
from aoflux.tools.base import ToolSpec

if TYPE_CHECKING:
    from aoflux.bridge.correlator import Outcome
    from aoflux.context import FluxContext
    from aoflux.network.models import MessageResult

SQLITE_PRELUDE = "local sqlite = require('lsqlite3')\nDb = sqlite.open_memory()\n"


def render_result(result: MessageResult) -> Outcome:
    """Render a whole settled result; an ``Error`` marks it as a failure."""
    text = normalize(result.to_json())
    if result.has_error:
        return Failure(kind=OutcomeKind.ERROR, text=text)
    return Success(text=text)


# ─── Input models ─────────────────────────────────────────────


class _Input(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TagInput(_Input):
    name: str
    value: str


class SpawnInput(_Input):
    tags: list[TagInput]
    needs_sqlite: bool | None = Field(default=None, alias="needsSqlite")


class SendMessageInput(_Input):
    process_id: str = Field(alias="processId")
    data: str
    tags: list[TagInput] | None = None


class ApmInstallInput(_Input):
    package_name: str = Field(alias="packageName")
    process_id: str = Field(alias="processId")


class ProcessInput(_Input):
    process_id: str = Field(alias="processId")


class HandlerCodeInput(_Input):
    process_id: str = Field(alias="processId")
    handler_code: str = Field(alias="handlerCode")


class RunLuaInput(_Input):
    code: str
    process_id: str = Field(alias="processId")
    tags: list[TagInput] | None = None


class LoadBlueprintInput(_Input):
    url: str
    process_id: str = Field(alias="processId")


class LocalBlueprintInput(_Input):
    blueprint_code: str = Field(alias="blueprintCode")
    process_id: str = Field(alias="processId")


class OfficialBlueprintInput(_Input):
    blueprint_name: str = Field(alias="blueprintName")
    process_id: str = Field(alias="processId")


class RunHandlerInput(_Input):
    process_id: str = Field(alias="processId")
    handler_name: str = Field(alias="handlerName")
    data: str


def _tags(tags: list[TagInput] | None) -> list[dict[str, str]]:
    return [t.model_dump() for t in tags or []]


# ─── Handlers ─────────────────────────────────────────────────


async def _spawn(ctx: FluxContext, params: SpawnInput) -> Outcome:
    variant = ModuleVariant.SQLITE if params.needs_sqlite else ModuleVariant.STANDARD
    process_id = await ctx.client.spawn(_tags(params.tags), variant, signer=ctx.signer)
    return Success(text=process_id)


async def _send_message(ctx: FluxContext, params: SendMessageInput) -> Outcome:
    return await ctx.correlator.submit_and_await(
        params.process_id, params.data, _tags(params.tags), ctx.signer
    )


async def _apm_install(ctx: FluxContext, params: ApmInstallInput) -> Outcome:
    return render_result(await install_package(ctx, params.package_name, params.process_id))


async def _load_token_blueprint(ctx: FluxContext, params: ProcessInput) -> Outcome:
    return render_result(await add_blueprint(ctx, "token", params.process_id))


async def _create_sqlite_handler(ctx: FluxContext, params: HandlerCodeInput) -> Outcome:
    code = SQLITE_PRELUDE + params.handler_code
    return render_result(await run_lua(ctx, code, params.process_id))


async def _run_lua(ctx: FluxContext, params: RunLuaInput) -> Outcome:
    return render_result(
        await run_lua(ctx, params.code, params.process_id, _tags(params.tags))
    )


async def _load_blueprint(ctx: FluxContext, params: LoadBlueprintInput) -> Outcome:
    return render_result(await load_blueprint(ctx, params.url, params.process_id))


async def _load_local_blueprint(ctx: FluxContext, params: LocalBlueprintInput) -> Outcome:
    return render_result(await run_lua(ctx, params.blueprint_code, params.process_id))


async def _load_official_blueprint(
    ctx: FluxContext, params: OfficialBlueprintInput
) -> Outcome:
    return render_result(await add_blueprint(ctx, params.blueprint_name, params.process_id))


async def _list_handlers(ctx: FluxContext, params: ProcessInput) -> Outcome:
    return render_result(await list_handlers(ctx, params.process_id))


async def _create_handler(ctx: FluxContext, params: HandlerCodeInput) -> Outcome:
    return render_result(await add_handler(ctx, params.process_id, params.handler_code))


async def _run_handler(ctx: FluxContext, params: RunHandlerInput) -> Outcome:
    return await run_handler(ctx, params.process_id, params.handler_name, params.data)


def builtin_tools() -> list[ToolSpec]:
    """Return every AO tool, in catalog order."""
    return [
        ToolSpec(
            "spawn",
            "Spawn a new AO process with the given tags. Returns the process id.",
            SpawnInput,
            _spawn,
        ),
        ToolSpec(
            "send-message-to-process",
            "Send a message to a process and return the data of its first reply.",
            SendMessageInput,
            _send_message,
        ),
        ToolSpec(
            "apm-install",
            "Install an APM package into a process.",
            ApmInstallInput,
            _apm_install,
        ),
        ToolSpec(
            "load-token-blueprint",
            "Load the official token blueprint into a process.",
            ProcessInput,
            _load_token_blueprint,
        ),
        ToolSpec(
            "create-sqlite-based-handler",
            "Create a handler backed by an in-memory SQLite database "
            "(process must be spawned with needsSqlite).",
            HandlerCodeInput,
            _create_sqlite_handler,
        ),
        ToolSpec(
            "run-lua-in-process",
            "Evaluate Lua code inside a process.",
            RunLuaInput,
            _run_lua,
        ),
        ToolSpec(
            "load-blueprint",
            "Fetch a blueprint from a URL and load it into a process.",
            LoadBlueprintInput,
            _load_blueprint,
        ),
        ToolSpec(
            "load-local-blueprint",
            "Load blueprint source code supplied by the caller into a process.",
            LocalBlueprintInput,
            _load_local_blueprint,
        ),
        ToolSpec(
            "load-official-blueprint",
            "Load an official blueprint by name into a process.",
            OfficialBlueprintInput,
            _load_official_blueprint,
        ),
        ToolSpec(
            "list-available-handlers",
            "List the names of the handlers registered in a process.",
            ProcessInput,
            _list_handlers,
        ),
        ToolSpec(
            "create-handler",
            "Evaluate handler registration code in a process.",
            HandlerCodeInput,
            _create_handler,
        ),
        ToolSpec(
            "run-handler-using-handler-name",
            "Invoke a process handler by name and return the data of its first reply.",
            RunHandlerInput,
            _run_handler,
        ),
    ]
