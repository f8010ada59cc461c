"""Core errors and shared utilities."""

from aoflux.core.errors import (
    BlueprintError,
    ConfigError,
    DuplicateToolError,
    EmptyResultError,
    FluxError,
    InvalidProcessError,
    NetworkError,
    NotFoundError,
    SigningError,
    ToolError,
    UnknownToolError,
    ValidationError,
)
from aoflux.core.retry import PollConfig, backoff_delay, poll_until_ready

__all__ = [
    "BlueprintError",
    "ConfigError",
    "DuplicateToolError",
    "EmptyResultError",
    "FluxError",
    "InvalidProcessError",
    "NetworkError",
    "NotFoundError",
    "PollConfig",
    "SigningError",
    "ToolError",
    "UnknownToolError",
    "ValidationError",
    "backoff_delay",
    "poll_until_ready",
]
