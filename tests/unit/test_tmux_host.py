"""
Unit tests for the tmux host, run against a fake libtmux server.
"""

from pathlib import Path
from types import SimpleNamespace

import pytest

from demoreel.checkpoint import CheckpointStore, HadValue, WasUnbound
from demoreel.errors import HostCommandError
from demoreel.host.base import FileRegion
from demoreel.host.tmux import TmuxHost, TmuxLayout, tmux_key
from demoreel.schema import SplitOrientation


class FakeServer:
    """Stands in for libtmux.Server: records commands, answers from a table."""

    def __init__(self) -> None:
        self.commands: list[tuple[str, ...]] = []
        self.zoomed = "0"
        self.options: dict[str, str] = {}
        self.panes = ["%0"]
        self.fail = False

    def cmd(self, *args: str) -> SimpleNamespace:
        self.commands.append(args)
        if self.fail:
            return SimpleNamespace(stdout=[], stderr=["can't find session: demo"])
        return SimpleNamespace(stdout=self._answer(args), stderr=[])

    def _answer(self, args: tuple[str, ...]) -> list[str]:
        command, last = args[0], args[-1]
        if command == "split-window":
            return ["%7"]
        if command == "new-window":
            return ["@3"]
        if command == "display-message":
            if last == "#{window_zoomed_flag}":
                return [self.zoomed]
            if last == "#{pane_id}":
                return ["%0"]
            return ["@1\tb25d,80x24,0,0,0"]
        if command == "list-panes":
            return list(self.panes)
        if command == "show-options":
            name = args[-1]
            return [f"{name} {self.options[name]}"] if name in self.options else []
        return []

    def issued(self, command: str) -> list[tuple[str, ...]]:
        return [args for args in self.commands if args[0] == command]


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def tmux(server: FakeServer) -> TmuxHost:
    return TmuxHost("demo", server=server)


class TestTmuxKey:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("RET", "Enter"),
            ("SPC", "Space"),
            ("TAB", "Tab"),
            ("ESC", "Escape"),
            ("DEL", "BSpace"),
            ("<f5>", "F5"),
            ("<up>", "Up"),
            ("C-x", "C-x"),
        ],
    )
    def test_translation(self, name: str, expected: str) -> None:
        assert tmux_key(name) == expected


class TestCommands:
    """Tests for tmux command construction."""

    def test_error_output_raises(self, tmux: TmuxHost, server: FakeServer) -> None:
        server.fail = True
        with pytest.raises(HostCommandError, match="can't find session"):
            tmux.single_pane()

    def test_split_pane(self, tmux: TmuxHost, server: FakeServer) -> None:
        assert tmux.split_pane(SplitOrientation.BELOW) == "%7"
        assert server.commands == [("split-window", "-v", "-t", "demo", "-P", "-F", "#{pane_id}")]

    def test_split_side(self, tmux: TmuxHost, server: FakeServer) -> None:
        tmux.split_pane(SplitOrientation.SIDE)
        assert server.commands[0][1] == "-h"

    def test_load_file(self, tmux: TmuxHost, server: FakeServer) -> None:
        tmux.load_file(Path("/talk/intro.txt"), pane="%2")
        assert server.commands == [("respawn-pane", "-k", "-t", "%2", "less -R /talk/intro.txt")]

    def test_load_file_region_uses_scratch_file(
        self, tmux: TmuxHost, server: FakeServer, temp_dir: Path
    ) -> None:
        source = temp_dir / "demo.py"
        source.write_text("one\ntwo\nthree\nfour\n")

        tmux.load_file(source, region=FileRegion(start_line=2, end_line=3))

        shown = Path(server.commands[0][-1].split(" ", 2)[-1])
        assert shown != source
        assert shown.read_text() == "two\nthree\n"
        tmux.restore_layout(TmuxLayout(window_id="@1", layout="b25d", pane_ids=("%0",)))
        assert not shown.exists()

    def test_start_shell(self, tmux: TmuxHost, server: FakeServer) -> None:
        pane = tmux.start_shell(directory=Path("/srv"), command="make", name="build")
        assert pane == "%0"
        assert server.issued("respawn-pane") == [("respawn-pane", "-k", "-t", "demo", "-c", "/srv")]
        assert server.issued("select-pane") == [("select-pane", "-t", "%0", "-T", "build")]
        assert server.issued("send-keys") == [
            ("send-keys", "-t", "%0", "-l", "make"),
            ("send-keys", "-t", "%0", "Enter"),
        ]

    def test_send_keys(self, tmux: TmuxHost, server: FakeServer) -> None:
        tmux.send_keys(("a", "RET", "C-l"), pane="%1")
        assert server.commands == [
            ("send-keys", "-t", "%1", "-l", "a"),
            ("send-keys", "-t", "%1", "Enter"),
            ("send-keys", "-t", "%1", "C-l"),
        ]

    def test_type_newline(self, tmux: TmuxHost, server: FakeServer) -> None:
        tmux.type_char("x")
        tmux.type_char("\n")
        assert server.commands == [
            ("send-keys", "-t", "demo", "-l", "x"),
            ("send-keys", "-t", "demo", "Enter"),
        ]


class TestScreen:
    """Tests for zoom and status line."""

    def test_fullscreen_zooms_once(self, tmux: TmuxHost, server: FakeServer) -> None:
        tmux.set_fullscreen(True)
        assert server.issued("resize-pane") == [("resize-pane", "-Z", "-t", "demo")]

    def test_fullscreen_when_already_zoomed(self, tmux: TmuxHost, server: FakeServer) -> None:
        server.zoomed = "1"
        tmux.set_fullscreen(True)
        assert server.issued("resize-pane") == []

    def test_status_line(self, tmux: TmuxHost, server: FakeServer) -> None:
        tmux.set_status_line(False)
        assert server.commands == [("set-option", "-t", "demo", "status", "off")]


class TestLayout:
    """Tests for layout snapshots."""

    def test_snapshot(self, tmux: TmuxHost, server: FakeServer) -> None:
        server.panes = ["%0", "%1"]
        assert tmux.snapshot_layout() == TmuxLayout(
            window_id="@1", layout="b25d,80x24,0,0,0", pane_ids=("%0", "%1")
        )

    def test_restore_kills_new_panes_and_titles(self, tmux: TmuxHost, server: FakeServer) -> None:
        snapshot = tmux.snapshot_layout()
        tmux.show_title(Path("title.txt"))
        server.panes = ["%0", "%4"]
        server.commands.clear()

        tmux.restore_layout(snapshot)

        assert server.issued("kill-window") == [("kill-window", "-t", "@3")]
        assert server.issued("kill-pane") == [("kill-pane", "-t", "%4")]
        assert server.issued("select-layout") == [("select-layout", "-t", "@1", "b25d,80x24,0,0,0")]


class TestSettings:
    """Tests for tmux global options as checkpointed settings."""

    def test_checkpoint_round_trip(self, tmux: TmuxHost, server: FakeServer) -> None:
        server.options["status-style"] = '"bg=green"'
        store = CheckpointStore(tmux.settings)

        store.checkpoint_and_set("status-style", "bg=black", "mouse", "on")
        assert store.disposition("status-style") == HadValue("bg=green")
        assert store.disposition("mouse") == WasUnbound()

        store.restore_all()
        assert ("set-option", "-g", "status-style", "bg=green") in server.commands
        assert ("set-option", "-g", "-u", "mouse") in server.commands
