"""
Action registry for demoreel.

The registry maps action names to action instances. Expression steps are
resolved against it when they are dispatched, so a script can name an
action that is registered after the script was loaded.

Usage:
    from demoreel.actions.registry import default_registry, register_action

    register_action(MyAction())
    action = default_registry.get("my.action")
"""

from demoreel.actions.base import Action
from demoreel.errors import ActionNotFoundError


class ActionRegistry:
    """
    Registry for looking up actions by name.

    Registering a name twice replaces the earlier action, which lets a
    presenter override a built-in action from a Python script.
    """

    def __init__(self) -> None:
        self._actions: dict[str, Action] = {}

    def register(self, action: Action) -> None:
        """
        Register an action.

        Raises:
            ValueError: If action is None or has an empty name
        """
        if action is None:
            msg = "Cannot register None as an action"
            raise ValueError(msg)
        if not action.name:
            msg = "Action must have a non-empty name"
            raise ValueError(msg)
        self._actions[action.name] = action

    def get(self, name: str) -> Action:
        """
        Look up an action by name.

        Raises:
            ActionNotFoundError: If no action with that name is registered
        """
        action = self._actions.get(name)
        if action is None:
            raise ActionNotFoundError(action=name)
        return action

    def has(self, name: str) -> bool:
        return name in self._actions


# Global default registry, used by the sequencer unless overridden
default_registry = ActionRegistry()


def register_action(action: Action) -> None:
    """Register an action in the default registry."""
    default_registry.register(action)
