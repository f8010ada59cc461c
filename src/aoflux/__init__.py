"""aoflux - MCP tools for driving AO processes."""

__version__ = "0.1.0"
