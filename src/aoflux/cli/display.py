"""Rich display for tool listings and tool results.

Used by the ``tools`` and ``call`` commands. Accepts an optional
:class:`~rich.console.Console` for dependency injection in tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from collections.abc import Sequence

    from aoflux.tools.base import ToolSpec


class ToolDisplay:
    """Styled output for the CLI."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def show_tools(self, specs: Sequence[ToolSpec]) -> None:
        """Display the tool catalog as a table."""
        table = Table(title=f"{len(specs)} tools", title_justify="left")
        table.add_column("Tool", style="bold cyan", no_wrap=True)
        table.add_column("Description")
        for spec in specs:
            table.add_row(spec.name, spec.description)
        self._console.print(table)

    def show_result(self, tool: str, text: str, *, is_error: bool) -> None:
        """Display one tool result in a panel, red when it failed."""
        color = "red" if is_error else "green"
        label = "FAILED" if is_error else "OK"
        self._console.print(
            Panel(
                # Result text is process output; never interpret it as markup.
                Text(text or "(empty)"),
                title=f"[bold {color}]{label}[/bold {color}] ({tool})",
                border_style=color,
            )
        )
