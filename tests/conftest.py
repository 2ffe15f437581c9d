"""
Pytest configuration and fixtures for demoreel tests.

This module provides shared fixtures used across unit and integration
tests: a recording fake host, a scripted fake operator and a zero-delay
pacer.
"""

import random
import tempfile
from pathlib import Path
from typing import Any, Generator

import pytest

from demoreel.checkpoint import CheckpointStore, MappingSettings
from demoreel.engine import DemoContext, Sequencer
from demoreel.errors import HostCommandError
from demoreel.schema import SplitOrientation
from demoreel.typist import Pacer


class FakeHost:
    """
    Host that records every call instead of driving a terminal.

    Attributes:
        calls: (method, args...) tuples in call order
        typed: Characters received by type_char()
        settings: Global settings backed by a dict
        fail_on: Method names that raise HostCommandError when called
    """

    def __init__(self, settings: dict[str, Any] | None = None) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.typed: list[str] = []
        self.settings = MappingSettings(settings if settings is not None else {})
        self.fail_on: set[str] = set()
        self.panes = ["%0"]
        self.fullscreen = False
        self.status_line = True

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, *args))
        if method in self.fail_on:
            raise HostCommandError(command=method, stderr="simulated failure")

    def methods(self) -> list[str]:
        return [call[0] for call in self.calls]

    def split_pane(self, orientation: SplitOrientation) -> str:
        self._record("split_pane", orientation)
        pane = f"%{len(self.panes)}"
        self.panes.append(pane)
        return pane

    def single_pane(self) -> None:
        self._record("single_pane")
        self.panes = self.panes[:1]

    def load_file(self, path, pane=None, region=None, scale=0) -> None:
        self._record("load_file", path, pane, region, scale)

    def start_shell(self, pane=None, directory=None, command=None, name=None) -> str:
        self._record("start_shell", pane, directory, command, name)
        return pane or self.panes[0]

    def show_title(self, path) -> None:
        self._record("show_title", path)

    def set_fullscreen(self, enabled: bool) -> None:
        self._record("set_fullscreen", enabled)
        self.fullscreen = enabled

    def toggle_fullscreen(self) -> None:
        self._record("toggle_fullscreen")
        self.fullscreen = not self.fullscreen

    def set_status_line(self, visible: bool) -> None:
        self._record("set_status_line", visible)
        self.status_line = visible

    def send_keys(self, keys: tuple[str, ...], pane=None) -> None:
        self._record("send_keys", keys, pane)

    def type_char(self, char: str, pane=None) -> None:
        self._record("type_char", char, pane)
        self.typed.append(char)

    def snapshot_layout(self) -> tuple[str, ...]:
        self._record("snapshot_layout")
        return tuple(self.panes)

    def restore_layout(self, snapshot: tuple[str, ...]) -> None:
        self._record("restore_layout", snapshot)
        self.panes = list(snapshot)


class FakeOperator:
    """Operator that collects notifications and acknowledgement prompts."""

    def __init__(self) -> None:
        self.notifications: list[str] = []
        self.acknowledgements: list[str] = []

    def notify(self, message: str) -> None:
        self.notifications.append(message)

    def acknowledge(self, message: str) -> None:
        self.acknowledgements.append(message)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def operator() -> FakeOperator:
    return FakeOperator()


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested from the pacer, in order."""
    return []


@pytest.fixture
def pacer(sleeps: list[float]) -> Pacer:
    """A pacer that records delays instead of sleeping."""
    return Pacer(sleep=sleeps.append, rng=random.Random(7))


@pytest.fixture
def sequencer(host: FakeHost, operator: FakeOperator, pacer: Pacer) -> Sequencer:
    context = DemoContext(checkpoints=CheckpointStore(host.settings))
    return Sequencer(host, operator, context=context, pacer=pacer)


@pytest.fixture
def sample_script_yaml() -> str:
    """Return a small demonstration script."""
    return """
version: "1.0"
name: intro
options:
  - advanced-mode
  - option: text-scale
    value: 2
texts:
  h: "echo hello\\n"
steps:
  - action: title.show
    args:
      path: slides/title.txt
  - action: shell.start
    args:
      name: demo
      split: true
  - type: "ls -la\\n"
  - keys: "C-l"
"""
