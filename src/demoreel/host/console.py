"""
Operator prompts on the presenter's terminal, rendered with Rich.
"""

from collections.abc import Callable

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text


class RichOperator:
    """
    Operator collaborator for the terminal running `demoreel present`.

    Attributes:
        console: Rich console used for output
        read_key: Reads one key press (click.getchar by default)
    """

    def __init__(
        self,
        console: Console | None = None,
        read_key: Callable[[], str] = click.getchar,
    ) -> None:
        self.console = console or Console()
        self.read_key = read_key

    def notify(self, message: str) -> None:
        self.console.print(f"[cyan]{escape(message)}[/cyan]")

    def acknowledge(self, message: str) -> None:
        self.console.print(Panel(Text(message), expand=False, border_style="yellow"))
        self.console.print("[dim]Press any key to continue...[/dim]")
        self.read_key()
