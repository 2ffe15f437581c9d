"""
Console report for demonstration scripts.

Renders a step table with Rich so a presenter can check a script before
going on stage.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from demoreel.schema import Preferences
from demoreel.steps import (
    CallableStep,
    ConfigOptionStep,
    ExpressionStep,
    KeySequenceStep,
    StepList,
    describe_step,
)

# Step kind labels
KIND_LABELS = {
    CallableStep: "[magenta]call[/magenta]",
    ExpressionStep: "[cyan]action[/cyan]",
    KeySequenceStep: "[green]keys[/green]",
    ConfigOptionStep: "[yellow]option[/yellow]",
}


def step_table(steps: StepList) -> Table:
    """Build a numbered table of steps."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="dim", width=4)
    table.add_column("Kind", width=7)
    table.add_column("Step")

    for number, step in enumerate(steps, start=1):
        kind = KIND_LABELS.get(type(step), "?")
        details = describe_step(step)
        if len(details) > 70:
            details = details[:67] + "..."
        table.add_row(str(number), kind, escape(details))
    return table


def print_script_report(
    steps: StepList,
    preferences: Preferences,
    console: Console | None = None,
    name: str | None = None,
) -> None:
    """Print the preferences and step table of a script."""
    if console is None:
        console = Console()

    if name:
        console.print(f"[bold]{escape(name)}[/bold]")
    options = ", ".join(opt.describe() for opt in steps.options) or "none"
    console.print(f"[dim]Options:[/dim] {escape(options)}")
    console.print(
        f"[dim]Mode:[/dim] {preferences.keymap_mode.value}  "
        f"[dim]Layout:[/dim] {preferences.layout.value}  "
        f"[dim]Screen:[/dim] {preferences.screen.value}  "
        f"[dim]Typing:[/dim] {preferences.typing_speed.value}"
    )
    console.print()
    console.print(step_table(steps))
    console.print(f"[dim]Total: {len(steps)} steps[/dim]")
