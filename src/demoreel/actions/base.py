"""
Base classes for the action interface.

Expression steps name an action ("file.load", "shell.start", ...) plus
arguments. At dispatch time the sequencer looks the action up in a registry
and runs it with an ActionContext.

Design Principles:
    - Actions are stateless - all state comes from ActionContext
    - Arguments are checked against run()'s signature before running
    - Actions raise on failure; the sequencer turns that into an abort
    - Actions are registered by name - the registry handles lookup
"""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from demoreel.errors import ActionArgumentError

if TYPE_CHECKING:
    from demoreel.checkpoint import CheckpointStore
    from demoreel.engine import Sequencer
    from demoreel.host.base import Host, Operator
    from demoreel.schema import Preferences


@dataclass
class ActionContext:
    """
    Runtime context passed to actions during dispatch.

    Attributes:
        host: The presentation environment
        operator: The presenter at the keyboard
        preferences: Preferences of the running demonstration
        checkpoints: Checkpoint store of the running demonstration
        sequencer: The sequencer dispatching the step
    """

    host: "Host"
    operator: "Operator"
    preferences: "Preferences"
    checkpoints: "CheckpointStore"
    sequencer: "Sequencer"


class Action(ABC):
    """
    Abstract base class for all named actions.

    Subclasses must implement:
    - name property: Returns the action's unique identifier
    - run(): Performs the action

    Example:
        class BellAction(Action):
            @property
            def name(self) -> str:
                return "bell.ring"

            def run(self, context: ActionContext, times: int = 1) -> None:
                context.host.send_keys(("C-g",) * times)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        The unique identifier for this action.

        Action names follow the convention: namespace.verb
        Examples: "file.load", "shell.start", "screen.toggle"
        """
        ...

    @property
    def description(self) -> str:
        return f"Action: {self.name}"

    @abstractmethod
    def run(self, context: ActionContext, *args: Any, **kwargs: Any) -> Any:
        """Perform the action. Raise on failure."""
        ...

    def validate_args(self, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> list[str]:
        """
        Check arguments against run()'s signature.

        Returns:
            List of validation error messages (empty if valid)
        """
        try:
            inspect.signature(self.run).bind(None, *args, **kwargs)
        except TypeError as e:
            return [str(e)]
        return []

    def execute(self, args: tuple[Any, ...], kwargs: Mapping[str, Any], context: ActionContext) -> Any:
        """Validate arguments, then run the action."""
        errors = self.validate_args(args, kwargs)
        if errors:
            raise ActionArgumentError(action=self.name, validation_error="; ".join(errors))
        return self.run(context, *args, **kwargs)

    def __repr__(self) -> str:
        return f"<Action: {self.name}>"
