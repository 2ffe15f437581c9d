"""
demoreel - Step-through live coding demonstrations in the terminal.

demoreel plays a prepared script back one step per key press while a
presenter talks: it opens files in panes, starts shells, types commands at
a human pace and replays keystrokes. It provides:
- A declarative step list (callables, named actions, keystrokes, options)
- Simple and advanced key-binding modes for the presenter
- Checkpointed global settings, restored when the demonstration ends
- A keystroke recorder that turns rehearsals into step source text

Example usage:
    $ demoreel check intro.yaml
    $ demoreel present intro.yaml --session talk
    $ demoreel record --out recorded.py
"""

__version__ = "0.1.0"
__author__ = "demoreel Contributors"

from demoreel.checkpoint import CheckpointStore
from demoreel.engine import DemoContext, Sequencer, StepResult, active_sequencer
from demoreel.recorder import KeystrokeRecorder, convert
from demoreel.schema import Preferences
from demoreel.script import LoadedScript, load_script
from demoreel.steps import (
    CallableStep,
    ConfigOptionStep,
    ExpressionStep,
    KeySequenceStep,
    StepList,
    build_step_list,
    expr,
    keys,
    option,
    typed,
)

__all__ = [
    "__version__",
    "__author__",
    "CallableStep",
    "CheckpointStore",
    "ConfigOptionStep",
    "DemoContext",
    "ExpressionStep",
    "KeySequenceStep",
    "KeystrokeRecorder",
    "LoadedScript",
    "Preferences",
    "Sequencer",
    "StepList",
    "StepResult",
    "active_sequencer",
    "build_step_list",
    "convert",
    "expr",
    "keys",
    "load_script",
    "option",
    "typed",
]
