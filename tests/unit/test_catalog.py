"""Tests for the built-in AO tool catalog, end to end through the registry."""

from __future__ import annotations

import json

import pytest

from aoflux.config.schema import NetworkConfig
from aoflux.context import FluxContext
from aoflux.network.models import MessageResult, Tag
from aoflux.tools import builtin_tools, default_registry
from aoflux.tools.catalog import SQLITE_PRELUDE, render_result
from aoflux.tools.registry import ToolRegistry
from tests.fixtures.network import PROCESS_ID, FakeAONetwork, tag_value

EXPECTED_TOOLS = [
    "spawn",
    "send-message-to-process",
    "apm-install",
    "load-token-blueprint",
    "create-sqlite-based-handler",
    "run-lua-in-process",
    "load-blueprint",
    "load-local-blueprint",
    "load-official-blueprint",
    "list-available-handlers",
    "create-handler",
    "run-handler-using-handler-name",
]


@pytest.fixture
def registry() -> ToolRegistry:
    return default_registry()


# ─── Catalog shape ────────────────────────────────────────────


class TestCatalog:
    def test_names_in_order(self):
        assert [t.name for t in builtin_tools()] == EXPECTED_TOOLS

    def test_every_tool_described(self):
        assert all(t.description for t in builtin_tools())

    @pytest.mark.parametrize(
        ("name", "required"),
        [
            ("spawn", {"tags"}),
            ("send-message-to-process", {"processId", "data"}),
            ("apm-install", {"packageName", "processId"}),
            ("load-token-blueprint", {"processId"}),
            ("create-sqlite-based-handler", {"processId", "handlerCode"}),
            ("run-lua-in-process", {"code", "processId"}),
            ("load-blueprint", {"url", "processId"}),
            ("load-local-blueprint", {"blueprintCode", "processId"}),
            ("load-official-blueprint", {"blueprintName", "processId"}),
            ("list-available-handlers", {"processId"}),
            ("create-handler", {"processId", "handlerCode"}),
            ("run-handler-using-handler-name", {"processId", "handlerName", "data"}),
        ],
    )
    def test_required_inputs(self, registry: ToolRegistry, name: str, required: set[str]):
        schema = registry.get(name).input_schema
        assert set(schema["required"]) == required

    def test_spawn_schema_uses_wire_names(self, registry: ToolRegistry):
        props = registry.get("spawn").input_schema["properties"]
        assert "needsSqlite" in props
        assert "needs_sqlite" not in props


class TestRenderResult:
    def test_success_renders_whole_result(self):
        body = {"Messages": [], "Output": {"data": "1"}}
        outcome = render_result(MessageResult.from_json(body))
        assert not outcome.is_error
        assert json.loads(outcome.text) == body

    def test_error_marks_failure(self):
        outcome = render_result(MessageResult.from_json({"Error": "bad", "Messages": []}))
        assert outcome.is_error
        assert '"Error": "bad"' in outcome.text


# ─── Dispatch through the fake network ────────────────────────


class TestSpawnTool:
    async def test_standard(self, registry, ctx: FluxContext, network: FakeAONetwork):
        response = await registry.dispatch(
            "spawn", {"tags": [{"name": "Name", "value": "demo"}]}, ctx
        )
        assert not response.is_error
        assert response.text_content == network.last_item.id
        assert tag_value(network.last_item, "Module") == NetworkConfig().standard_module
        assert network.last_item.tags[-1] == Tag("Name", "demo")

    async def test_sqlite(self, registry, ctx: FluxContext, network: FakeAONetwork):
        await registry.dispatch("spawn", {"tags": [], "needsSqlite": True}, ctx)
        assert tag_value(network.last_item, "Module") == NetworkConfig().sqlite_module

    async def test_network_failure_is_text(
        self, registry, ctx: FluxContext, network: FakeAONetwork
    ):
        network.mu_status = 500
        response = await registry.dispatch("spawn", {"tags": []}, ctx)
        assert response.is_error
        assert "HTTP 500" in response.text_content


class TestMessageTools:
    async def test_send_message(self, registry, ctx: FluxContext, network: FakeAONetwork):
        network.responder = lambda item: {"Messages": [{"Data": "pong"}]}
        response = await registry.dispatch(
            "send-message-to-process",
            {"processId": PROCESS_ID, "data": "ping", "tags": [{"name": "Action", "value": "Ping"}]},
            ctx,
        )
        assert response.text_content == '"pong"'
        assert tag_value(network.last_item, "Action") == "Ping"

    async def test_send_message_error(self, registry, ctx: FluxContext, network: FakeAONetwork):
        network.responder = lambda item: {"Error": {"code": "x"}}
        response = await registry.dispatch(
            "send-message-to-process", {"processId": PROCESS_ID, "data": "ping"}, ctx
        )
        assert response.is_error
        assert response.text_content == '{\n  "code": "x"\n}'

    async def test_send_message_empty(self, registry, ctx: FluxContext):
        response = await registry.dispatch(
            "send-message-to-process", {"processId": PROCESS_ID, "data": "ping"}, ctx
        )
        assert response.is_error
        assert "no messages" in response.text_content

    async def test_send_message_bad_process(self, registry, ctx: FluxContext):
        response = await registry.dispatch(
            "send-message-to-process", {"processId": "nope", "data": "ping"}, ctx
        )
        assert response.is_error
        assert "Invalid process" in response.text_content

    async def test_run_handler(self, registry, ctx: FluxContext, network: FakeAONetwork):
        network.responder = lambda item: {"Messages": [{"Data": {"balance": 5}}]}
        response = await registry.dispatch(
            "run-handler-using-handler-name",
            {"processId": PROCESS_ID, "handlerName": "Balance", "data": ""},
            ctx,
        )
        assert response.text_content == '{\n  "balance": 5\n}'
        assert tag_value(network.last_item, "Action") == "Balance"


class TestEvalTools:
    async def test_run_lua(self, registry, ctx: FluxContext, network: FakeAONetwork):
        network.responder = lambda item: {"Messages": [], "Output": {"data": "2"}}
        response = await registry.dispatch(
            "run-lua-in-process", {"code": "return 1 + 1", "processId": PROCESS_ID}, ctx
        )
        assert not response.is_error
        assert json.loads(response.text_content)["Output"] == {"data": "2"}
        assert tag_value(network.last_item, "Action") == "Eval"

    async def test_run_lua_error(self, registry, ctx: FluxContext, network: FakeAONetwork):
        network.responder = lambda item: {"Error": "syntax error", "Messages": []}
        response = await registry.dispatch(
            "run-lua-in-process", {"code": "return (", "processId": PROCESS_ID}, ctx
        )
        assert response.is_error
        assert "syntax error" in response.text_content

    async def test_sqlite_handler_gets_prelude(
        self, registry, ctx: FluxContext, network: FakeAONetwork
    ):
        code = "Handlers.add('q', 'Query', function(msg) end)"
        await registry.dispatch(
            "create-sqlite-based-handler", {"processId": PROCESS_ID, "handlerCode": code}, ctx
        )
        assert network.last_item.data == (SQLITE_PRELUDE + code).encode()

    async def test_create_handler(self, registry, ctx: FluxContext, network: FakeAONetwork):
        await registry.dispatch(
            "create-handler", {"processId": PROCESS_ID, "handlerCode": "x = 1"}, ctx
        )
        assert network.last_item.data == b"x = 1"

    async def test_list_handlers(self, registry, ctx: FluxContext, network: FakeAONetwork):
        network.responder = lambda item: {"Messages": [], "Output": {"data": '["_eval"]'}}
        response = await registry.dispatch(
            "list-available-handlers", {"processId": PROCESS_ID}, ctx
        )
        assert "_eval" in response.text_content

    async def test_local_blueprint(self, registry, ctx: FluxContext, network: FakeAONetwork):
        await registry.dispatch(
            "load-local-blueprint", {"blueprintCode": "Name = 'x'", "processId": PROCESS_ID}, ctx
        )
        assert network.last_item.data == b"Name = 'x'"


class TestBlueprintTools:
    async def test_token_blueprint(self, registry, ctx: FluxContext, network: FakeAONetwork):
        base = ctx.config.blueprints.base_url.rstrip("/")
        network.blueprints[f"{base}/token.lua"] = "Balances = {}"
        response = await registry.dispatch(
            "load-token-blueprint", {"processId": PROCESS_ID}, ctx
        )
        assert not response.is_error
        assert network.last_item.data == b"Balances = {}"

    async def test_official_blueprint(self, registry, ctx: FluxContext, network: FakeAONetwork):
        base = ctx.config.blueprints.base_url.rstrip("/")
        network.blueprints[f"{base}/chatroom.lua"] = "Members = {}"
        await registry.dispatch(
            "load-official-blueprint", {"blueprintName": "chatroom", "processId": PROCESS_ID}, ctx
        )
        assert network.last_item.data == b"Members = {}"

    async def test_official_blueprint_bad_name(
        self, registry, ctx: FluxContext, network: FakeAONetwork
    ):
        response = await registry.dispatch(
            "load-official-blueprint", {"blueprintName": "../x", "processId": PROCESS_ID}, ctx
        )
        assert response.is_error
        assert network.items == []

    async def test_blueprint_by_url(self, registry, ctx: FluxContext, network: FakeAONetwork):
        url = "https://example.com/bp.lua"
        network.blueprints[url] = "Bp = true"
        await registry.dispatch("load-blueprint", {"url": url, "processId": PROCESS_ID}, ctx)
        assert network.last_item.data == b"Bp = true"

    async def test_missing_blueprint_is_text(self, registry, ctx: FluxContext):
        response = await registry.dispatch(
            "load-blueprint", {"url": "https://example.com/missing.lua", "processId": PROCESS_ID}, ctx
        )
        assert response.is_error
        assert "Cannot load blueprint" in response.text_content

    async def test_apm_install(self, registry, ctx: FluxContext, network: FakeAONetwork):
        network.blueprints[ctx.config.blueprints.apm_client_url] = "apm = {}"
        await registry.dispatch(
            "apm-install", {"packageName": "@rakis/DbAdmin", "processId": PROCESS_ID}, ctx
        )
        assert network.last_item.data.endswith(b'apm.install("@rakis/DbAdmin")')
