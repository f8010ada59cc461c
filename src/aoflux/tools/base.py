"""Tool spec and response types.

A tool is a name, a description, a pydantic input model (whose JSON
schema is advertised to callers), and an async handler that receives
the shared :class:`FluxContext` plus the validated input.
"""

from __future__ import annotations

import enum
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from mcp.types import TextContent
from pydantic import BaseModel

if TYPE_CHECKING:
    from aoflux.bridge.correlator import Outcome
    from aoflux.context import FluxContext

Handler = Callable[["FluxContext", Any], Awaitable["Outcome"]]


class InvocationState(enum.Enum):
    """Lifecycle of one tool invocation; COMPLETED and FAILED are terminal."""

    RECEIVED = "received"
    VALIDATED = "validated"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """A registered tool."""

    name: str
    description: str
    input_model: type[BaseModel]
    handler: Handler

    @property
    def input_schema(self) -> dict[str, Any]:
        """JSON Schema for the tool's input, using the wire field names."""
        return self.input_model.model_json_schema(by_alias=True)


@dataclass(frozen=True, slots=True)
class ToolResponse:
    """Uniform response envelope.

    Failures are carried in the text content, never as a protocol
    fault; ``is_error`` lets local callers tell them apart.
    """

    content: list[TextContent] = field(default_factory=list)
    is_error: bool = False
    state: InvocationState = InvocationState.COMPLETED

    @classmethod
    def text(cls, text: str, *, is_error: bool = False) -> ToolResponse:
        return cls(
            content=[TextContent(type="text", text=text)],
            is_error=is_error,
            state=InvocationState.FAILED if is_error else InvocationState.COMPLETED,
        )

    @property
    def text_content(self) -> str:
        return "\n".join(c.text for c in self.content)
