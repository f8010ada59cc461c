"""MCP transport for the AO tools."""
