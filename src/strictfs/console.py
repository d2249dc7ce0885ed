"""Rich console output helpers for the command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from strictfs.config import FilesystemSettings


class ConsoleOutput:
    """Formats command results and errors for the terminal."""

    def __init__(self, console: Console | None = None, err_console: Console | None = None) -> None:
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    def show_success(self, message: str) -> None:
        """Show success message.

        Args:
            message: Success message.
        """
        self.console.print(f"[green]\u2713[/green] {escape(message)}", highlight=False, soft_wrap=True)

    def show_error(self, message: str) -> None:
        """Show error message on stderr.

        Args:
            message: Error message.
        """
        self.err_console.print(f"[red]\u2717[/red] {escape(message)}", highlight=False, soft_wrap=True)

    def show_info(self, message: str) -> None:
        self.console.print(message, highlight=False, markup=False, soft_wrap=True)

    def show_settings(self, settings: FilesystemSettings, source: str) -> None:
        """Show settings in a table.

        Args:
            settings: Settings to display.
            source: Where the settings were loaded from.
        """
        table = Table(title=f"Configuration ({source})")
        table.add_column("Key", style="cyan")
        table.add_column("Value")

        for name, value in settings.model_dump().items():
            if name == "new_file_mode" and value is not None:
                value = f"{value:04o}"
            table.add_row(name, str(value))

        self.console.print(table)


def configure_logging(verbose: bool) -> None:
    """Route log records through rich, at DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
