"""Tool framework: specs, registry, and the AO tool catalog."""

from aoflux.tools.base import InvocationState, ToolResponse, ToolSpec
from aoflux.tools.catalog import builtin_tools
from aoflux.tools.registry import ToolRegistry


def default_registry() -> ToolRegistry:
    """A registry holding every built-in AO tool."""
    registry = ToolRegistry()
    registry.register_all(builtin_tools())
    return registry


__all__ = [
    "InvocationState",
    "ToolRegistry",
    "ToolResponse",
    "ToolSpec",
    "builtin_tools",
    "default_registry",
]
