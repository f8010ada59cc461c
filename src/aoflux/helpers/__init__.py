"""Lua, blueprint, package and handler helpers built on the bridge."""

from aoflux.helpers.apm import install_package
from aoflux.helpers.blueprint import add_blueprint, fetch_blueprint_code, load_blueprint
from aoflux.helpers.handlers import add_handler, list_handlers, run_handler
from aoflux.helpers.lua import lua_string, run_lua

__all__ = [
    "add_blueprint",
    "add_handler",
    "fetch_blueprint_code",
    "install_package",
    "list_handlers",
    "load_blueprint",
    "lua_string",
    "run_handler",
    "run_lua",
]
