"""
Text, key and settings actions.

- text.type: type text with the typing simulation
- keys.send: replay a key sequence
- settings.set: override global settings, checkpointed for the session
- message.show: show a message to the presenter
"""

from typing import Any

from demoreel.actions.base import Action, ActionContext


class TypeTextAction(Action):
    """
    Type text character by character, paced by the typing profile.

    Arguments:
        text (str): Text to type (required)
        pane (str): Target pane id (optional)
    """

    @property
    def name(self) -> str:
        return "text.type"

    @property
    def description(self) -> str:
        return "Type text as if live, one character at a time"

    def run(self, context: ActionContext, text: str, pane: str | None = None) -> None:
        context.sequencer.type_text(text, pane=pane)


class SendKeysAction(Action):
    @property
    def name(self) -> str:
        return "keys.send"

    @property
    def description(self) -> str:
        return "Replay a key sequence such as 'C-x o'"

    def run(self, context: ActionContext, keys: str, pane: str | None = None) -> None:
        context.host.send_keys(tuple(keys.split()), pane=pane)


class SetSettingsAction(Action):
    """
    Override global settings until the demonstration ends.

    Arguments are name/value pairs: settings.set("status", "off", "mouse", "on")
    """

    @property
    def name(self) -> str:
        return "settings.set"

    @property
    def description(self) -> str:
        return "Override global settings, restored when the demonstration ends"

    def run(self, context: ActionContext, name: str, value: Any, *more: Any) -> None:
        context.checkpoints.checkpoint_and_set(name, value, *more)


class ShowMessageAction(Action):
    @property
    def name(self) -> str:
        return "message.show"

    def run(self, context: ActionContext, text: str) -> None:
        context.operator.notify(text)


TEXT_ACTIONS: tuple[type[Action], ...] = (
    TypeTextAction,
    SendKeysAction,
    SetSettingsAction,
    ShowMessageAction,
)


def text_actions() -> list[Action]:
    return [cls() for cls in TEXT_ACTIONS]
