"""Tool registry for the AO tool catalog.

Provides registration, lookup, listing, and dispatch of
:class:`ToolSpec` entries. Dispatch validates input against the tool's
model, runs the handler, and always hands back a :class:`ToolResponse`;
handler failures become text content.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pydantic

from aoflux.bridge.correlator import Failure, OutcomeKind, failure_from
from aoflux.core.errors import (
    DuplicateToolError,
    FluxError,
    UnknownToolError,
    ValidationError,
)
from aoflux.tools.base import InvocationState, ToolResponse

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pydantic import BaseModel

    from aoflux.context import FluxContext
    from aoflux.tools.base import ToolSpec

logger = logging.getLogger(__name__)


def _field_errors(error: pydantic.ValidationError) -> list[str]:
    fields = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<input>"
        fields.append(f"{loc} ({err['msg']})")
    return fields


class ToolRegistry:
    """Registry for managing available tools."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(self, spec: ToolSpec) -> None:
        """Register a tool.

        Raises:
            DuplicateToolError: If a tool with the same name is already registered.
        """
        if spec.name in self._tools:
            raise DuplicateToolError(spec.name)
        self._tools[spec.name] = spec

    def register_all(self, specs: Iterable[ToolSpec]) -> None:
        for spec in specs:
            self.register(spec)

    def get(self, name: str) -> ToolSpec:
        """Get a tool by name.

        Raises:
            UnknownToolError: If the tool is not found.
        """
        if name not in self._tools:
            raise UnknownToolError(name)
        return self._tools[name]

    def list_specs(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def list_names(self) -> list[str]:
        """Return names of all registered tools."""
        return list(self._tools.keys())

    def validate(self, name: str, arguments: dict[str, Any] | None) -> BaseModel:
        """Validate arguments against a tool's input model.

        Raises:
            UnknownToolError: If the tool is not found.
            ValidationError: Listing every violated field.
        """
        return self._validate(self.get(name), arguments)

    @staticmethod
    def _validate(spec: ToolSpec, arguments: dict[str, Any] | None) -> BaseModel:
        try:
            return spec.input_model.model_validate(arguments or {})
        except pydantic.ValidationError as e:
            raise ValidationError(spec.name, _field_errors(e)) from e

    async def dispatch(
        self, name: str, arguments: dict[str, Any] | None, ctx: FluxContext
    ) -> ToolResponse:
        """Validate, run, and wrap one tool invocation.

        Unknown tools and invalid input raise before the handler runs.
        Anything the handler raises is rendered into the response text.
        """
        logger.debug("Tool %s %s", name, InvocationState.RECEIVED.value)
        spec = self.get(name)
        params = self._validate(spec, arguments)
        logger.debug("Tool %s %s", name, InvocationState.VALIDATED.value)

        logger.debug("Tool %s %s", name, InvocationState.DISPATCHED.value)
        try:
            outcome = await spec.handler(ctx, params)
        except FluxError as e:
            outcome = failure_from(e)
        except Exception as e:
            logger.exception("Tool %s raised", name)
            outcome = Failure(kind=OutcomeKind.INTERNAL, text=f"Tool execution error: {e}")

        response = ToolResponse.text(outcome.text, is_error=outcome.is_error)
        logger.info("Tool %s %s (%s)", name, response.state.value, outcome.kind.value)
        return response

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools
