"""Console output for the stitchcli commands, rendered with rich."""

import json
import logging
from typing import Any, Mapping, Optional, Sequence

from rich.console import Console
from rich.json import JSON
from rich.table import Table

logger = logging.getLogger(__name__)

class ConsoleDisplay:
    """Writes command results, info and errors to the terminal."""

    def __init__(self, console: Optional[Console] = None, error_console: Optional[Console] = None):
        """Initializes the rich Consoles (results on stdout, errors on stderr)."""
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)

    def display_output(self, output: str) -> None:
        """Prints plain text without markup processing."""
        self.console.print(output, markup=False, highlight=False)

    def display_json(self, data: Any) -> None:
        """Pretty-prints a JSON-serializable value."""
        try:
            self.console.print(JSON(json.dumps(data, ensure_ascii=False, default=str)))
        except (TypeError, ValueError) as e:
            logger.error(f"Error rendering JSON output: {e}")
            self.display_output(str(data))

    def display_summary(self, merged: Mapping[str, Sequence[Any]], title: str = "Records") -> None:
        """Shows a resource / record count table for a merged result."""
        table = Table(title=title)
        table.add_column("Resource", style="cyan")
        table.add_column("Records", justify="right", style="bold")
        for key, records in merged.items():
            table.add_row(str(key), str(len(records)))
        self.console.print(table)

    def display_info(self, message: str) -> None:
        self.error_console.print(f"[blue]Info:[/blue] {message}")

    def display_error(self, message: str) -> None:
        self.error_console.print(f"[bold red]Error:[/bold red] {message}")
