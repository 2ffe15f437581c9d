"""
Collaborator interfaces consumed by the sequencer.

The sequencer never touches the screen itself. Everything visible goes
through two narrow, synchronous collaborators:

- Host: the environment being presented (panes, files, shells, titles,
  full-screen, status lines, keystrokes)
- Operator: the presenter at the keyboard (notifications and
  acknowledgement prompts)

Calls either succeed or raise. Implementations may rely on structural
typing rather than inheritance.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from demoreel.checkpoint import SettingsBackend
from demoreel.schema import SplitOrientation


@dataclass(frozen=True)
class FileRegion:
    """
    Part of a file to show. Line numbers are 1-based and inclusive;
    character offsets are 0-based and end-exclusive.
    """

    start_line: int | None = None
    end_line: int | None = None
    start_char: int | None = None
    end_char: int | None = None

    def extract(self, text: str) -> str:
        if self.start_char is not None or self.end_char is not None:
            text = text[self.start_char:self.end_char]
        if self.start_line is not None or self.end_line is not None:
            lines = text.splitlines(keepends=True)
            start = (self.start_line or 1) - 1
            text = "".join(lines[start:self.end_line])
        return text


class Host(Protocol):
    """The presentation environment."""

    settings: SettingsBackend

    def split_pane(self, orientation: SplitOrientation) -> str:
        """Split the current pane and return the new pane's id."""
        ...

    def single_pane(self) -> None:
        """Close every pane but the current one."""
        ...

    def load_file(
        self,
        path: Path,
        pane: str | None = None,
        region: FileRegion | None = None,
        scale: int = 0,
    ) -> None:
        ...

    def start_shell(
        self,
        pane: str | None = None,
        directory: Path | None = None,
        command: str | None = None,
        name: str | None = None,
    ) -> str:
        """Start an interactive shell and return its pane id."""
        ...

    def show_title(self, path: Path) -> None:
        """Show a file as a full-screen title."""
        ...

    def set_fullscreen(self, enabled: bool) -> None:
        ...

    def toggle_fullscreen(self) -> None:
        ...

    def set_status_line(self, visible: bool) -> None:
        ...

    def send_keys(self, keys: tuple[str, ...], pane: str | None = None) -> None:
        """Replay human-readable key names such as 'C-x', 'RET' or 'a'."""
        ...

    def type_char(self, char: str, pane: str | None = None) -> None:
        """Insert one literal character as if typed."""
        ...

    def snapshot_layout(self) -> Any:
        """Return an opaque snapshot of the current pane arrangement."""
        ...

    def restore_layout(self, snapshot: Any) -> None:
        ...


class Operator(Protocol):
    """The presenter at the keyboard."""

    def notify(self, message: str) -> None:
        ...

    def acknowledge(self, message: str) -> None:
        """Show a message and wait for one acknowledgement input."""
        ...
