"""
Keystroke recorder and converter.

The recorder captures keystrokes while a presenter rehearses, then turns
each recording into step source text that can be pasted into a Python
demonstration script:

    steps = build_step_list(
        typed("git status\\n"),
        keys("C-x o"),
    )

Recording is a two-state machine, IDLE and RECORDING. start_recording()
enters RECORDING; a single handle() call consuming COMMIT or CANCEL returns
to IDLE, either keeping the capture (most recent first) or discarding it.

Conversion rule: a recording whose keys are all plain typed text
(printable ASCII, 0x20-0x7E, plus newline) becomes a typed("...") step.
Anything else, including named keys such as "<f5>", becomes a keys("...")
step using human-readable key names.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from demoreel.errors import NotRecordingError, RecordingActiveError

LOG = logging.getLogger(__name__)

PLAIN_TEXT_FIRST = 0x20
PLAIN_TEXT_LAST = 0x7E
NEWLINE = 0x0A

_NAMED_KEYS = {
    "\x00": "C-@",
    "\t": "TAB",
    "\n": "C-j",
    "\r": "RET",
    "\x1b": "ESC",
    " ": "SPC",
    "\x7f": "DEL",
}


class RecorderState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"


class RecorderEvent(str, Enum):
    COMMIT = "commit"
    CANCEL = "cancel"


@dataclass(frozen=True)
class RecordedMacro:
    """
    One finished recording.

    Attributes:
        keys: Captured keys in order. Each is a single character, or a
            named key such as "<f5>" for keys with no character.
    """

    keys: tuple[str, ...]


# =============================================================================
# Conversion
# =============================================================================


def is_plain_text(keys: Iterable[str]) -> bool:
    """
    Whether every key is plain typed text.

    Raises:
        TypeError: For keys that are not single characters
    """
    for key in keys:
        point = ord(key)
        if point != NEWLINE and not PLAIN_TEXT_FIRST <= point <= PLAIN_TEXT_LAST:
            return False
    return True


def describe_key(key: str) -> str:
    """Human-readable name of one key, e.g. 'C-x', 'RET' or 'a'."""
    if len(key) != 1:
        return key
    if key in _NAMED_KEYS:
        return _NAMED_KEYS[key]
    point = ord(key)
    if point < 0x20:
        return f"C-{chr(point + 0x40).lower()}"
    return key


def key_description(keys: Iterable[str]) -> str:
    """Space-separated key names, the format KeySequenceStep replays."""
    return " ".join(describe_key(key) for key in keys)


def escape_literal(text: str) -> str:
    """Escape backslash, double quote and newline for a double-quoted literal."""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def convert(macro: RecordedMacro) -> str:
    """
    Serialize a recording as step source text.

    Returns:
        'typed("...")' for plain text, 'keys("...")' otherwise
    """
    try:
        plain = is_plain_text(macro.keys)
    except TypeError:
        plain = False

    if plain:
        return f'typed("{escape_literal("".join(macro.keys))}")'
    return f'keys("{escape_literal(key_description(macro.keys))}")'


def render_step_list(macros: Iterable[RecordedMacro]) -> str:
    """Render macros, in the given order, as one build_step_list(...) block."""
    lines = [f"    {convert(macro)}," for macro in macros]
    if not lines:
        return "steps = build_step_list()\n"
    return "steps = build_step_list(\n" + "\n".join(lines) + "\n)\n"


# =============================================================================
# Recorder
# =============================================================================


class KeystrokeRecorder:
    """
    Captures keystroke recordings.

    Usage:
        recorder = KeystrokeRecorder()
        recorder.start_recording()
        for key in "hello\\n":
            recorder.feed(key)
        recorder.handle(RecorderEvent.COMMIT)
        recorder.yank_recorded_actions(editor.insert)
    """

    def __init__(self) -> None:
        self.state = RecorderState.IDLE
        self._capture: list[str] = []
        self._recordings: list[RecordedMacro] = []

    @property
    def recording(self) -> bool:
        return self.state == RecorderState.RECORDING

    @property
    def recordings(self) -> list[RecordedMacro]:
        """Finished recordings, most recent first."""
        return list(self._recordings)

    def start_recording(self) -> None:
        """
        Begin capturing keystrokes.

        Raises:
            RecordingActiveError: If a recording is already active
        """
        if self.recording:
            raise RecordingActiveError()
        self.state = RecorderState.RECORDING
        self._capture = []

    def feed(self, key: str) -> None:
        """Capture one key."""
        if not self.recording:
            raise NotRecordingError()
        self._capture.append(key)

    def handle(self, event: RecorderEvent) -> RecordedMacro | None:
        """
        Finish the active recording.

        Returns:
            The stored recording on COMMIT, None on CANCEL
        """
        if not self.recording:
            raise NotRecordingError()

        macro = RecordedMacro(keys=tuple(self._capture))
        self.state = RecorderState.IDLE
        self._capture = []

        if event == RecorderEvent.CANCEL:
            LOG.debug("Recording cancelled (%d keys discarded)", len(macro.keys))
            return None
        self._recordings.insert(0, macro)
        LOG.debug("Recording committed (%d keys)", len(macro.keys))
        return macro

    def clear_recordings(self) -> None:
        self._recordings.clear()

    def render(self) -> str:
        """All recordings, oldest first, as one build_step_list(...) block."""
        return render_step_list(reversed(self._recordings))

    def yank_recorded_actions(self, insert: Callable[[str], None]) -> str:
        """
        Insert the rendered block at the current edit position.

        Recordings are kept, so the block can be yanked again.
        """
        block = self.render()
        insert(block)
        return block
