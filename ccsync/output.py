"""Output formatting for the ccsync CLI."""

import json
import sys
from typing import Any, Optional

from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Formats CLI output with rich, honoring quiet and JSON modes.

    Messages go to stderr so that stdout carries only the report (plain
    lines or JSON).
    """

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of tables
            quiet: Suppress non-essential output
            console: Console for regular output (defaults to stdout)
            err_console: Console for messages (defaults to stderr)
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console(file=sys.stdout, highlight=False)
        self.err_console = err_console or Console(file=sys.stderr, highlight=False)

    def print(self, message: str = "") -> None:
        """Print a plain line unless quiet or in JSON mode."""
        if self.quiet or self.json_output:
            return
        self.console.print(message, markup=False, soft_wrap=True)

    def info(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self.err_console.print(message, markup=False, soft_wrap=True)

    def success(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self.err_console.print(
            message, style="green", markup=False, soft_wrap=True
        )

    def warning(self, message: str) -> None:
        if self.json_output:
            return
        self.err_console.print(
            message, style="yellow", markup=False, soft_wrap=True
        )

    def error(self, message: str) -> None:
        """Print an error. Errors are shown even in quiet mode."""
        self.err_console.print(
            f"Error: {message}", style="bold red", markup=False, soft_wrap=True
        )

    def output_json(self, data: Any) -> None:
        """Write ``data`` to stdout as indented JSON."""
        self.console.print(
            json.dumps(data, indent=2), markup=False, highlight=False, soft_wrap=True
        )

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a two-column summary table.

        Args:
            title: Table title
            items: (label, value) rows
        """
        if self.quiet or self.json_output:
            return
        table = Table(title=title, show_header=False, title_justify="left")
        table.add_column("Label", style="bold")
        table.add_column("Value")
        for label, value in items:
            table.add_row(label, value)
        self.console.print(table)
