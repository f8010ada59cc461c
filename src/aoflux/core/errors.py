"""Exception hierarchy for aoflux.

Every module imports from here. The hierarchy is:

    FluxError
    ├── NetworkError
    │   ├── InvalidProcessError(process_id)
    │   └── NotFoundError(message_id, process_id)
    ├── EmptyResultError(message_id, process_id)
    ├── BlueprintError(source)
    ├── ToolError
    │   ├── ValidationError(tool, fields)
    │   ├── DuplicateToolError(name)
    │   └── UnknownToolError(name)
    ├── SigningError
    └── ConfigError
"""

from __future__ import annotations


class FluxError(Exception):
    """Base exception for all aoflux errors."""


# ─── Network Errors ───────────────────────────────────────────


class NetworkError(FluxError):
    """Submission or transport failure talking to the AO network."""


class InvalidProcessError(NetworkError):
    """Target process is unknown or unreachable."""

    def __init__(self, process_id: str, detail: str = "") -> None:
        self.process_id = process_id
        msg = f"Invalid process {process_id!r}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class NotFoundError(NetworkError):
    """The compute unit has not materialized a result yet."""

    def __init__(self, message_id: str, process_id: str) -> None:
        self.message_id = message_id
        self.process_id = process_id
        super().__init__(
            f"No result yet for message {message_id} on process {process_id}"
        )


# ─── Result Errors ────────────────────────────────────────────


class EmptyResultError(FluxError):
    """A settled result carried neither an error nor any message."""

    def __init__(self, message_id: str, process_id: str) -> None:
        self.message_id = message_id
        self.process_id = process_id
        super().__init__(
            f"Message {message_id} on process {process_id} "
            "settled with no error and no messages"
        )


class BlueprintError(FluxError):
    """Blueprint code could not be fetched."""

    def __init__(self, source: str, detail: str) -> None:
        self.source = source
        super().__init__(f"Cannot load blueprint from {source}: {detail}")


# ─── Tool Errors ──────────────────────────────────────────────


class ToolError(FluxError):
    """Base for tool registration and dispatch errors."""


class ValidationError(ToolError):
    """Tool input did not match the tool's schema."""

    def __init__(self, tool: str, fields: list[str]) -> None:
        self.tool = tool
        self.fields = fields
        super().__init__(f"Invalid input for {tool}: {', '.join(fields)}")


class DuplicateToolError(ToolError):
    """A tool with the same name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool already registered: {name}")


class UnknownToolError(ToolError):
    """No tool is registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


# ─── Signing / Configuration Errors ───────────────────────────


class SigningError(FluxError):
    """Wallet key material is missing or malformed."""


class ConfigError(FluxError):
    """Invalid configuration."""
