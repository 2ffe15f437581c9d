"""
Actions module for demoreel.

Expression steps run named actions. Built-in actions:
    - pane.split, pane.single
    - file.load, shell.start, title.show
    - screen.fullscreen, screen.windowed, screen.toggle
    - status-line.show, status-line.hide
    - text.type, keys.send, settings.set, message.show

Architecture:
    - Action: Abstract base class defining the action interface
    - ActionRegistry: Central registry for looking up actions by name
    - ActionContext: Runtime context passed to actions (host, preferences, ...)
"""

from demoreel.actions.base import Action, ActionContext
from demoreel.actions.registry import (
    ActionRegistry,
    default_registry,
    register_action,
)
from demoreel.actions.text import text_actions
from demoreel.actions.view import view_actions


def register_builtin_actions(registry: ActionRegistry) -> None:
    """Register every built-in action in a registry."""
    for action in [*view_actions(), *text_actions()]:
        registry.register(action)


register_builtin_actions(default_registry)

__all__ = [
    "Action",
    "ActionContext",
    "ActionRegistry",
    "default_registry",
    "register_action",
    "register_builtin_actions",
]
