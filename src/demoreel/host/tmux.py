"""
tmux host for demoreel.

Presents inside a tmux session: panes are tmux panes, files are shown with
less, shells are respawned panes, full-screen is pane zoom, and the status
line is the session's status bar. Global settings overridden during a
demonstration are tmux global options.

Every call goes through libtmux's Server.cmd(), which runs one tmux command
and returns its stdout/stderr lines.
"""

import logging
import shlex
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import libtmux

from demoreel.errors import HostCommandError
from demoreel.host.base import FileRegion
from demoreel.schema import SplitOrientation

LOG = logging.getLogger(__name__)

# Human-readable key names -> tmux key names
_TMUX_KEYS = {
    "RET": "Enter",
    "SPC": "Space",
    "TAB": "Tab",
    "ESC": "Escape",
    "DEL": "BSpace",
    "C-j": "C-j",
}

_PAGER = "less -R"


@dataclass(frozen=True)
class TmuxLayout:
    """Snapshot of the presented window."""

    window_id: str
    layout: str
    pane_ids: tuple[str, ...]


def tmux_key(name: str) -> str:
    """Translate 'RET', '<f5>', 'C-x' and friends to tmux key names."""
    if name in _TMUX_KEYS:
        return _TMUX_KEYS[name]
    if name.startswith("<") and name.endswith(">") and len(name) > 2:
        inner = name[1:-1]
        return inner.upper() if inner[:1] in "fF" and inner[1:].isdigit() else inner.capitalize()
    return name


class TmuxSettings:
    """SettingsBackend over tmux global options."""

    def __init__(self, host: "TmuxHost") -> None:
        self._host = host

    def lookup(self, name: str) -> tuple[bool, Any]:
        lines = self._host.cmd("show-options", "-g", "-q", name)
        if not lines:
            return False, None
        _, _, value = lines[0].partition(" ")
        value = value.strip().strip('"')
        return True, value or None

    def assign(self, name: str, value: Any) -> None:
        self._host.cmd("set-option", "-g", name, "" if value is None else str(value))

    def unset(self, name: str) -> None:
        self._host.cmd("set-option", "-g", "-u", name)


class TmuxHost:
    """
    Host backed by a tmux session.

    Attributes:
        session: Name of the tmux session being presented
        server: libtmux Server used to run tmux commands
        settings: Global tmux options, for the checkpoint store
    """

    def __init__(
        self,
        session: str,
        server: Any | None = None,
        socket_name: str | None = None,
    ) -> None:
        self.session = session
        self.server = server if server is not None else libtmux.Server(socket_name=socket_name)
        self.settings = TmuxSettings(self)
        self._title_windows: list[str] = []
        self._scratch: list[Path] = []

    def cmd(self, *args: str) -> list[str]:
        """
        Run one tmux command.

        Raises:
            HostCommandError: If tmux reports an error
        """
        LOG.debug("tmux %s", " ".join(args))
        result = self.server.cmd(*args)
        if result.stderr:
            raise HostCommandError(command=" ".join(args), stderr="\n".join(result.stderr))
        return list(result.stdout)

    def _target(self, pane: str | None) -> str:
        return pane or self.session

    # -------------------------------------------------------------------------
    # Panes
    # -------------------------------------------------------------------------

    def split_pane(self, orientation: SplitOrientation) -> str:
        flag = "-h" if orientation == SplitOrientation.SIDE else "-v"
        lines = self.cmd("split-window", flag, "-t", self.session, "-P", "-F", "#{pane_id}")
        return lines[0]

    def single_pane(self) -> None:
        self.cmd("kill-pane", "-a", "-t", self.session)

    def load_file(
        self,
        path: Path,
        pane: str | None = None,
        region: FileRegion | None = None,
        scale: int = 0,
    ) -> None:
        if scale:
            LOG.debug("tmux cannot scale text; ignoring scale %d for %s", scale, path)
        shown = path
        if region is not None:
            shown = self._scratch_file(region.extract(path.read_text(encoding="utf-8")), path.suffix)
        self.cmd("respawn-pane", "-k", "-t", self._target(pane), f"{_PAGER} {shlex.quote(str(shown))}")

    def start_shell(
        self,
        pane: str | None = None,
        directory: Path | None = None,
        command: str | None = None,
        name: str | None = None,
    ) -> str:
        target = self._target(pane)
        args = ["respawn-pane", "-k", "-t", target]
        if directory is not None:
            args += ["-c", str(directory)]
        self.cmd(*args)
        pane_id = self.cmd("display-message", "-p", "-t", target, "#{pane_id}")[0]
        if name:
            self.cmd("select-pane", "-t", pane_id, "-T", name)
        if command:
            self.cmd("send-keys", "-t", pane_id, "-l", command)
            self.cmd("send-keys", "-t", pane_id, "Enter")
        return pane_id

    def show_title(self, path: Path) -> None:
        lines = self.cmd(
            "new-window", "-t", self.session, "-P", "-F", "#{window_id}",
            f"{_PAGER} {shlex.quote(str(path))}",
        )
        self._title_windows.append(lines[0])

    # -------------------------------------------------------------------------
    # Screen
    # -------------------------------------------------------------------------

    def _zoomed(self) -> bool:
        return self.cmd("display-message", "-p", "-t", self.session, "#{window_zoomed_flag}")[0] == "1"

    def set_fullscreen(self, enabled: bool) -> None:
        if self._zoomed() != enabled:
            self.toggle_fullscreen()

    def toggle_fullscreen(self) -> None:
        self.cmd("resize-pane", "-Z", "-t", self.session)

    def set_status_line(self, visible: bool) -> None:
        self.cmd("set-option", "-t", self.session, "status", "on" if visible else "off")

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def send_keys(self, keys: tuple[str, ...], pane: str | None = None) -> None:
        target = self._target(pane)
        for key in keys:
            if len(key) == 1:
                self.cmd("send-keys", "-t", target, "-l", key)
            else:
                self.cmd("send-keys", "-t", target, tmux_key(key))

    def type_char(self, char: str, pane: str | None = None) -> None:
        target = self._target(pane)
        if char == "\n":
            self.cmd("send-keys", "-t", target, "Enter")
        else:
            self.cmd("send-keys", "-t", target, "-l", char)

    # -------------------------------------------------------------------------
    # Layout
    # -------------------------------------------------------------------------

    def snapshot_layout(self) -> TmuxLayout:
        window_id, layout = self.cmd(
            "display-message", "-p", "-t", self.session, "#{window_id}\t#{window_layout}"
        )[0].split("\t", 1)
        panes = self.cmd("list-panes", "-t", window_id, "-F", "#{pane_id}")
        return TmuxLayout(window_id=window_id, layout=layout, pane_ids=tuple(panes))

    def restore_layout(self, snapshot: TmuxLayout) -> None:
        for window_id in self._title_windows:
            self.cmd("kill-window", "-t", window_id)
        self._title_windows.clear()

        for pane_id in self.cmd("list-panes", "-t", snapshot.window_id, "-F", "#{pane_id}"):
            if pane_id not in snapshot.pane_ids:
                self.cmd("kill-pane", "-t", pane_id)
        self.cmd("select-layout", "-t", snapshot.window_id, snapshot.layout)
        self.cmd("select-window", "-t", snapshot.window_id)

        for scratch in self._scratch:
            scratch.unlink(missing_ok=True)
        self._scratch.clear()

    def _scratch_file(self, text: str, suffix: str) -> Path:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", suffix=suffix, prefix="demoreel-", delete=False
        ) as f:
            f.write(text)
        path = Path(f.name)
        self._scratch.append(path)
        return path
