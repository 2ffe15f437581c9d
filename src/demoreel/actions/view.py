"""
View actions: panes, files, shells, titles, full-screen and status lines.

These are thin wrappers over the Host collaborator. They fill in defaults
from the demonstration's preferences (split orientation, text scale) and
otherwise pass arguments straight through.
"""

from pathlib import Path

from demoreel.actions.base import Action, ActionContext
from demoreel.host.base import FileRegion
from demoreel.schema import SplitOrientation


def _target_pane(context: ActionContext, pane: str | None, split: bool) -> str | None:
    if split:
        return context.host.split_pane(context.preferences.split)
    return pane


class SplitPaneAction(Action):
    """
    Split the current pane.

    Arguments:
        orientation (str): "side" or "below" (optional, default from preferences)
    """

    @property
    def name(self) -> str:
        return "pane.split"

    @property
    def description(self) -> str:
        return "Split the current pane in two"

    def run(self, context: ActionContext, orientation: str | None = None) -> str:
        if orientation is None:
            resolved = context.preferences.split
        else:
            resolved = SplitOrientation(orientation)
        return context.host.split_pane(resolved)


class SinglePaneAction(Action):
    @property
    def name(self) -> str:
        return "pane.single"

    @property
    def description(self) -> str:
        return "Close every pane but the current one"

    def run(self, context: ActionContext) -> None:
        context.host.single_pane()


class LoadFileAction(Action):
    """
    Load a file into a pane.

    Arguments:
        path (str): File to show (required)
        pane (str): Target pane id (optional)
        split (bool): Open the file in a new pane (optional)
        start_line, end_line (int): 1-based inclusive line range (optional)
        start_char, end_char (int): 0-based character range (optional)
        scale (int): Font scale increment (optional, default from preferences)
    """

    @property
    def name(self) -> str:
        return "file.load"

    @property
    def description(self) -> str:
        return "Show a file, or part of one, in a pane"

    def run(
        self,
        context: ActionContext,
        path: str,
        pane: str | None = None,
        split: bool = False,
        start_line: int | None = None,
        end_line: int | None = None,
        start_char: int | None = None,
        end_char: int | None = None,
        scale: int | None = None,
    ) -> None:
        region = None
        if any(v is not None for v in (start_line, end_line, start_char, end_char)):
            region = FileRegion(
                start_line=start_line,
                end_line=end_line,
                start_char=start_char,
                end_char=end_char,
            )
        context.host.load_file(
            Path(path).expanduser(),
            pane=_target_pane(context, pane, split),
            region=region,
            scale=context.preferences.text_scale if scale is None else scale,
        )


class StartShellAction(Action):
    """
    Start an interactive shell.

    Arguments:
        name (str): Label for the shell (optional)
        directory (str): Directory to change to first (optional)
        command (str): Command to run once the shell is up (optional)
        pane (str): Target pane id (optional)
        split (bool): Start the shell in a new pane (optional)
    """

    @property
    def name(self) -> str:
        return "shell.start"

    @property
    def description(self) -> str:
        return "Start an interactive shell, optionally running a command"

    def run(
        self,
        context: ActionContext,
        name: str | None = None,
        directory: str | None = None,
        command: str | None = None,
        pane: str | None = None,
        split: bool = False,
    ) -> str:
        return context.host.start_shell(
            pane=_target_pane(context, pane, split),
            directory=Path(directory).expanduser() if directory else None,
            command=command,
            name=name,
        )


class ShowTitleAction(Action):
    @property
    def name(self) -> str:
        return "title.show"

    @property
    def description(self) -> str:
        return "Show a file as a full-screen title"

    def run(self, context: ActionContext, path: str) -> None:
        context.host.show_title(Path(path).expanduser())


class FullscreenAction(Action):
    @property
    def name(self) -> str:
        return "screen.fullscreen"

    def run(self, context: ActionContext) -> None:
        context.host.set_fullscreen(True)


class WindowedAction(Action):
    @property
    def name(self) -> str:
        return "screen.windowed"

    def run(self, context: ActionContext) -> None:
        context.host.set_fullscreen(False)


class ToggleFullscreenAction(Action):
    @property
    def name(self) -> str:
        return "screen.toggle"

    def run(self, context: ActionContext) -> None:
        context.host.toggle_fullscreen()


class ShowStatusLineAction(Action):
    @property
    def name(self) -> str:
        return "status-line.show"

    def run(self, context: ActionContext) -> None:
        context.host.set_status_line(True)


class HideStatusLineAction(Action):
    @property
    def name(self) -> str:
        return "status-line.hide"

    def run(self, context: ActionContext) -> None:
        context.host.set_status_line(False)


VIEW_ACTIONS: tuple[type[Action], ...] = (
    SplitPaneAction,
    SinglePaneAction,
    LoadFileAction,
    StartShellAction,
    ShowTitleAction,
    FullscreenAction,
    WindowedAction,
    ToggleFullscreenAction,
    ShowStatusLineAction,
    HideStatusLineAction,
)


def view_actions() -> list[Action]:
    return [cls() for cls in VIEW_ACTIONS]
