"""
CLI entry point for demoreel.

This module provides the Typer-based command-line interface for demoreel.

Commands:
    present     Play a demonstration script inside a tmux session
    check       Validate a script and show its steps
    record      Record keystrokes and print them as step source text

Architecture Note:
    The CLI is thin: it loads scripts, wires the tmux host and the console
    operator into a Sequencer, and turns key presses into operator commands.
    The sequencer itself has no knowledge of terminals or key reading.
"""

import logging
import traceback
from collections.abc import Callable
from pathlib import Path
from typing import Annotated, Optional

import click
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.prompt import IntPrompt

from demoreel import __version__
from demoreel.actions import default_registry
from demoreel.checkpoint import CheckpointStore
from demoreel.engine import DemoContext, Sequencer, StepResult
from demoreel.errors import DemoError
from demoreel.host.console import RichOperator
from demoreel.host.tmux import TmuxHost
from demoreel.keymap import OperatorCommand
from demoreel.recorder import KeystrokeRecorder, RecorderEvent, convert, describe_key
from demoreel.report import print_script_report
from demoreel.schema import Preferences, StepStatus
from demoreel.script import LoadedScript, load_script
from demoreel.steps import ExpressionStep, StepList, option

LOG = logging.getLogger(__name__)

# Initialize Typer app with metadata
app = typer.Typer(
    name="demoreel",
    help="Step through live coding demonstrations in the terminal.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()

# Ctrl-] resumes disabled key bindings while presenting, and commits a recording
RESUME_KEY = "\x1d"
COMMIT_KEY = "\x1d"
# Ctrl-G cancels a recording
CANCEL_KEY = "\x07"

# Terminal escape sequences -> named keys
ESCAPE_SEQUENCES = {
    "\x1b[A": "<up>",
    "\x1b[B": "<down>",
    "\x1b[C": "<right>",
    "\x1b[D": "<left>",
    "\x1b[H": "<home>",
    "\x1b[F": "<end>",
    "\x1bOP": "<f1>",
    "\x1bOQ": "<f2>",
    "\x1bOR": "<f3>",
    "\x1bOS": "<f4>",
    "\x1b[15~": "<f5>",
}

SCRIPT_HEADER = "from demoreel import build_step_list, keys, typed\n\n"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]demoreel[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    demoreel - Step-through live coding demonstrations.

    Prepare a script once, then present it one key press at a time.
    """
    pass


def configure_logging(verbose: bool, debug: bool) -> None:
    """Route log records through Rich: --verbose shows INFO, --debug shows DEBUG."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=debug, show_path=debug)],
        force=True,
    )


def _print_error(error: Exception, debug: bool) -> None:
    console.print(f"[red]{escape(str(error))}[/red]")
    suggestion = getattr(error, "suggestion", None)
    if suggestion:
        console.print(f"[dim]{escape(suggestion)}[/dim]")
    if debug:
        console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")


def _load_or_exit(script_path: Path, debug: bool) -> LoadedScript:
    try:
        return load_script(script_path)
    except DemoError as e:
        console.print("[red]Error loading script:[/red]")
        _print_error(e, debug)
        raise typer.Exit(code=1)


# =============================================================================
# present
# =============================================================================


def retry_failed_steps(
    sequencer: Sequencer,
    result: Optional[StepResult],
    confirm_retry: Optional[Callable[[int], bool]],
) -> Optional[StepResult]:
    """Re-run a failed step for as long as the operator asks to retry it."""
    while (
        result is not None
        and result.status == StepStatus.FAILED
        and confirm_retry is not None
        and confirm_retry(result.step_number)
    ):
        result = sequencer.re_advance()
    return result


def operator_loop(
    sequencer: Sequencer,
    read_key: Callable[[], str],
    read_number: Callable[[], Optional[int]],
    confirm_retry: Optional[Callable[[int], bool]] = None,
) -> None:
    """
    Turn key presses into operator commands until the demonstration ends.

    While key bindings are disabled, keys are forwarded to the presented
    pane, except Ctrl-] which turns the bindings back on. When a step fails,
    confirm_retry is asked whether to re-run it after a manual fix.
    """
    while sequencer.running:
        key = read_key()
        if not key:
            LOG.info("Input closed, ending the demonstration")
            sequencer.end()
            return

        keymap = sequencer.context.keymap
        if keymap is None:
            if key == RESUME_KEY:
                sequencer.enable_mode()
                sequencer.operator.notify("Key bindings resumed.")
            else:
                _forward_key(sequencer, key)
            continue

        command = keymap.lookup(key)
        if command is None:
            LOG.debug("Unbound key %r", key)
            continue

        argument: object = None
        if command == OperatorCommand.JUMP:
            argument = read_number()
            if argument is None:
                continue
        elif command in (OperatorCommand.INSERT_TEXT, OperatorCommand.ADVANCE_AND_INSERT):
            argument = read_key()

        result = sequencer.perform(command, argument)
        retry_failed_steps(sequencer, result, confirm_retry)
        if command == OperatorCommand.DISABLE_MODE:
            sequencer.operator.notify("Key bindings disabled. Press Ctrl-] to resume.")


def _forward_key(sequencer: Sequencer, key: str) -> None:
    if key in ESCAPE_SEQUENCES:
        name = ESCAPE_SEQUENCES[key]
    elif len(key) == 1:
        name = describe_key(key)
    else:
        LOG.debug("Not forwarding unknown sequence %r", key)
        return
    sequencer.host.send_keys((name,))


def _read_step_number() -> Optional[int]:
    number = IntPrompt.ask("Jump to step", console=console, default=0)
    return number or None


def _confirm_retry(step_number: int) -> bool:
    return typer.confirm(f"Step {step_number} failed. Retry it after fixing the problem?", default=True)


@app.command()
def present(
    script_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the script (.yaml, .yml or .py).",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ],
    advanced: Annotated[
        Optional[bool],
        typer.Option(
            "--advanced/--simple",
            help="Key-binding mode. Defaults to the script's options.",
        ),
    ] = None,
    instant: Annotated[
        bool,
        typer.Option(
            "--instant",
            help="Insert typed text instantly (rehearsals).",
        ),
    ] = False,
    session: Annotated[
        str,
        typer.Option(
            "--session",
            "-s",
            help="Name of the tmux session to present in.",
        ),
    ] = "demo",
    socket: Annotated[
        Optional[str],
        typer.Option(
            "--socket",
            "-L",
            help="tmux server socket name.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Enable verbose output.",
        ),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Enable debug mode with full error tracebacks.",
        ),
    ] = False,
) -> None:
    """
    Play a demonstration script inside a tmux session.

    Simple mode: space, enter or n advance, q ends.
    Advanced mode: ] advances, } advances then types the predefined text
    for the next key, t types predefined text, Q ends.
    Both: g jumps, r re-runs, ? shows the step, d disables the bindings.
    After a failed step, fix the problem and confirm to re-run it.

    Example:
        $ demoreel present intro.yaml --session talk --advanced
    """
    configure_logging(verbose, debug)
    loaded = _load_or_exit(script_path, debug)

    steps = loaded.steps
    if instant:
        steps = StepList(steps=steps.steps, options=(*steps.options, option(":insert-instant")))

    host = TmuxHost(session, socket_name=socket)
    operator = RichOperator(console=console)
    context = DemoContext(texts=loaded.texts, checkpoints=CheckpointStore(host.settings))
    sequencer = Sequencer(host, operator, context=context)

    if loaded.name:
        console.print(f"[bold]{escape(loaded.name)}[/bold] [dim]({len(steps)} steps)[/dim]")

    try:
        result = sequencer.start(steps, advanced=advanced)
        retry_failed_steps(sequencer, result, _confirm_retry)
        operator_loop(sequencer, operator.read_key, _read_step_number, _confirm_retry)
    except KeyboardInterrupt:
        if sequencer.running:
            sequencer.end()
        console.print("[yellow]Interrupted.[/yellow]")
        raise typer.Exit(code=130)
    except Exception as e:
        if sequencer.running:
            sequencer.end()
        console.print("[red]Demonstration error:[/red]")
        _print_error(e, debug)
        raise typer.Exit(code=1)

    console.print(f"[green]✓[/green] Demonstration ended at step {context.current_step}")


# =============================================================================
# check
# =============================================================================


def find_action_problems(steps: StepList) -> list[str]:
    """Unknown actions and bad arguments of every expression step."""
    problems = []
    for number, step in enumerate(steps, start=1):
        if not isinstance(step, ExpressionStep):
            continue
        if not default_registry.has(step.action):
            problems.append(f"Step {number}: unknown action '{step.action}'")
            continue
        for error in default_registry.get(step.action).validate_args(step.args, step.kwargs):
            problems.append(f"Step {number}: {step.action}: {error}")
    return problems


@app.command()
def check(
    script_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the script (.yaml, .yml or .py).",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ],
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Enable debug mode with full error tracebacks.",
        ),
    ] = False,
) -> None:
    """
    Validate a script and show its steps.

    Example:
        $ demoreel check intro.yaml
    """
    loaded = _load_or_exit(script_path, debug)
    preferences = loaded.steps.apply_options(Preferences())
    print_script_report(loaded.steps, preferences, console=console, name=loaded.name)

    problems = find_action_problems(loaded.steps)
    if problems:
        console.print()
        console.print(f"[red]Script has {len(problems)} problem(s):[/red]")
        for problem in problems:
            console.print(f"  [red]•[/red] {escape(problem)}")
        raise typer.Exit(code=1)

    console.print("[green]✓[/green] Script is valid")


# =============================================================================
# record
# =============================================================================


def read_terminal_key() -> str:
    """Read one key press from the terminal for `demoreel record`."""
    return click.getchar()


def record_one(recorder: KeystrokeRecorder, read_key: Callable[[], str]) -> bool:
    """
    Record keys until Ctrl-] commits or Ctrl-G cancels.

    Returns:
        False if input ended before the recording was finished
    """
    recorder.start_recording()
    while True:
        key = read_key()
        if not key:
            recorder.handle(RecorderEvent.CANCEL)
            return False
        if key == COMMIT_KEY:
            macro = recorder.handle(RecorderEvent.COMMIT)
            console.print(f"[green]✓[/green] {escape(convert(macro))}")
            return True
        if key == CANCEL_KEY:
            recorder.handle(RecorderEvent.CANCEL)
            console.print("[yellow]Recording cancelled.[/yellow]")
            return True
        if key == "\r":
            key = "\n"
        recorder.feed(ESCAPE_SEQUENCES.get(key, key))


@app.command()
def record(
    out: Annotated[
        Optional[Path],
        typer.Option(
            "--out",
            "-o",
            help="Write a Python script to this file instead of printing the steps.",
            resolve_path=True,
        ),
    ] = None,
) -> None:
    """
    Record keystrokes and turn them into step source text.

    Type while recording; Ctrl-] keeps the recording, Ctrl-G discards it.
    Plain text becomes typed("...") steps, anything else keys("...") steps.

    Example:
        $ demoreel record --out recorded.py
    """
    recorder = KeystrokeRecorder()
    while True:
        console.print("[bold]Recording...[/bold] [dim]Ctrl-] to keep, Ctrl-G to discard[/dim]")
        if not record_one(recorder, read_terminal_key):
            break
        if not typer.confirm("Record another?", default=False):
            break

    if not recorder.recordings:
        console.print("[dim]Nothing recorded.[/dim]")
        raise typer.Exit(code=0)

    if out is not None:
        recorder.yank_recorded_actions(lambda block: out.write_text(SCRIPT_HEADER + block, encoding="utf-8"))
        console.print(f"[green]✓[/green] Wrote {len(recorder.recordings)} step(s) to {escape(str(out))}")
    else:
        recorder.yank_recorded_actions(lambda block: typer.echo(block, nl=False))


if __name__ == "__main__":
    app()
