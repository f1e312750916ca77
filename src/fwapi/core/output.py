"""Console output for the CLI, the executor and the API server.

Provides:
- Tagged log lines with verbosity control
- Error reports with details and hints
- Tables and YAML panels for the CLI
"""

from enum import IntEnum
from typing import Any

from rich import box
from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from fwapi.core.exceptions import FwapiError


class Verbosity(IntEnum):
    """Output verbosity levels."""
    QUIET = 0    # Errors only
    NORMAL = 1   # Standard output
    VERBOSE = 2  # Error details, server settings
    DEBUG = 3    # Every iptables command line


class Console:
    """Process-wide console.

    Log lines go to stdout, warnings and errors to stderr. Errors are
    printed at every verbosity level.
    """

    def __init__(self) -> None:
        self.verbosity = Verbosity.NORMAL
        self.no_color = False
        self._build()

    def _build(self) -> None:
        self._out = RichConsole(highlight=False, no_color=self.no_color)
        self._err = RichConsole(stderr=True, highlight=False, no_color=self.no_color)

    def configure(self, verbosity: int = 1, no_color: bool = False) -> None:
        """Set verbosity (clamped to QUIET..DEBUG) and colour."""
        self.verbosity = Verbosity(max(Verbosity.QUIET, min(verbosity, Verbosity.DEBUG)))
        if no_color != self.no_color:
            self.no_color = no_color
            self._build()

    def _line(self, level: Verbosity, tag: str, message: str) -> None:
        if self.verbosity >= level:
            self._out.print(f"{tag} {message}")

    def info(self, message: str) -> None:
        self._line(Verbosity.NORMAL, "[green][INFO][/green]", message)

    def success(self, message: str) -> None:
        self._line(Verbosity.NORMAL, "[green][OK][/green]", message)

    def step(self, message: str) -> None:
        """One line per iptables invocation."""
        self._line(Verbosity.NORMAL, "[blue]->[/blue]", message)

    def verbose(self, message: str) -> None:
        if self.verbosity >= Verbosity.VERBOSE:
            self._out.print(f"[dim]{message}[/dim]")

    def debug(self, message: str) -> None:
        self._line(Verbosity.DEBUG, "[cyan][DEBUG][/cyan]", message)

    def warn(self, message: str) -> None:
        self._err.print(f"[yellow][WARN][/yellow] {message}")

    def error(self, message: str) -> None:
        self._err.print(f"[red][ERROR][/red] {message}")

    def hint(self, message: str) -> None:
        self._err.print(f"[cyan]Hint:[/cyan] {message}")

    def report(self, error: FwapiError) -> None:
        """Print an error with its details and hint."""
        self.error(error.message)
        for detail in error.details:
            self._err.print(f"  [dim]{detail}[/dim]")
        if error.hint:
            self.hint(error.hint)

    def print(self, message: Any = "", **kwargs: Any) -> None:
        """Print raw text or a Rich renderable."""
        self._out.print(message, **kwargs)

    def table(self, title: str, columns: list[str], rows: list[list[str]]) -> None:
        table = Table(title=title, box=box.ROUNDED)
        for col in columns:
            table.add_column(col)
        for row in rows:
            table.add_row(*row)
        self._out.print(table)

    def yaml(self, yaml_text: str, title: str = "Configuration") -> None:
        syntax = Syntax(yaml_text, "yaml", theme="monokai", line_numbers=False)
        self._out.print(Panel(syntax, title=title, border_style="cyan"))


# Global console instance
console = Console()
