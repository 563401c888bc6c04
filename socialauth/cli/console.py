"""Console output for the CLI, wrapping rich."""

from typing import Any

from rich.console import Console as RichConsole
from rich.table import Table


class Console:
    """CLI output manager wrapping rich."""

    def __init__(self, *, force_terminal: bool | None = None) -> None:
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)

    def success(self, message: str) -> None:
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def info(self, message: str) -> None:
        self._console.print(f"[dim]{message}[/dim]")

    def table(self, rows: list[dict[str, Any]], columns: list[tuple[str, str]]) -> None:
        """Print rows as a table of (key, header) columns."""
        table = Table(show_header=True, header_style="bold")
        for _, header in columns:
            table.add_column(header)
        for row in rows:
            table.add_row(*(str(row.get(key, "")) for key, _ in columns))
        self._console.print(table)


_console: Console | None = None


def get_console() -> Console:
    global _console
    if _console is None:
        _console = Console()
    return _console
