"""
Key-binding modes.

While a demonstration runs, one keymap is active. It maps single keys read
from the operator's terminal to operator commands.

Simple mode binds common keys (space, enter, n) to advance, which suits a
presenter who does nothing but step through. Advanced mode only advances on
the dedicated key ']', leaving ordinary keys free. Its '}' variant advances and
then types the predefined text bound to the next key pressed; it also has a
plain typed-text insertion key and an early-termination key.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from demoreel.schema import KeymapMode


class OperatorCommand(str, Enum):
    """Commands the operator can trigger while a demonstration runs."""

    ADVANCE = "advance"
    JUMP = "jump"
    RE_ADVANCE = "re-advance"
    SHOW_STEP = "show-step"
    ADVANCE_AND_INSERT = "advance-and-insert"
    INSERT_TEXT = "insert-text"
    DISABLE_MODE = "disable-mode"
    END = "end"


@dataclass(frozen=True)
class Keymap:
    mode: KeymapMode
    bindings: Mapping[str, OperatorCommand]

    def lookup(self, key: str) -> OperatorCommand | None:
        return self.bindings.get(key)

    def keys_for(self, command: OperatorCommand) -> list[str]:
        return [key for key, bound in self.bindings.items() if bound == command]


_COMMON_BINDINGS = {
    "g": OperatorCommand.JUMP,
    "r": OperatorCommand.RE_ADVANCE,
    "?": OperatorCommand.SHOW_STEP,
    "d": OperatorCommand.DISABLE_MODE,
}

SIMPLE_KEYMAP = Keymap(
    mode=KeymapMode.SIMPLE,
    bindings=MappingProxyType({
        " ": OperatorCommand.ADVANCE,
        "\r": OperatorCommand.ADVANCE,
        "\n": OperatorCommand.ADVANCE,
        "n": OperatorCommand.ADVANCE,
        "q": OperatorCommand.END,
        **_COMMON_BINDINGS,
    }),
)

ADVANCED_KEYMAP = Keymap(
    mode=KeymapMode.ADVANCED,
    bindings=MappingProxyType({
        "]": OperatorCommand.ADVANCE,
        "}": OperatorCommand.ADVANCE_AND_INSERT,
        "t": OperatorCommand.INSERT_TEXT,
        "Q": OperatorCommand.END,
        **_COMMON_BINDINGS,
    }),
)


def keymap_for(mode: KeymapMode) -> Keymap:
    if mode == KeymapMode.ADVANCED:
        return ADVANCED_KEYMAP
    return SIMPLE_KEYMAP
