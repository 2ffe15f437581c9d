"""
Step definitions and the declarative step-list constructor.

A demonstration is an ordered StepList. Each Step is one of four variants:
- CallableStep: a zero-argument Python callable
- ExpressionStep: a named action resolved through the action registry
- KeySequenceStep: literal keystrokes replayed into a pane
- ConfigOptionStep: a configuration keyword changing one preference

Example:
    from demoreel import build_step_list, expr, keys, typed

    steps = build_step_list(
        ":advanced-mode",
        ":text-scale", 2,
        expr("file.load", "slides/intro.txt"),
        ("shell.start", "demo"),
        typed("ls -la\\n"),
        keys("C-l"),
    )
"""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from functools import partial
from types import MappingProxyType
from typing import Any

from demoreel.errors import InvalidStepError
from demoreel.schema import (
    VALUED_OPTION_KEYWORDS,
    Preferences,
    apply_option,
    is_option_keyword,
)


# =============================================================================
# Step Variants
# =============================================================================


@dataclass(frozen=True)
class CallableStep:
    """A step that invokes a zero-argument callable."""

    func: Callable[[], Any]
    description: str = ""

    def describe(self) -> str:
        if self.description:
            return self.description
        return f"call {getattr(self.func, '__name__', repr(self.func))}"


@dataclass(frozen=True)
class ExpressionStep:
    """A step that runs a registered action with arguments when dispatched."""

    action: str
    args: tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=dict, hash=False)
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "kwargs", MappingProxyType(dict(self.kwargs)))

    def describe(self) -> str:
        if self.description:
            return self.description
        params = [repr(a) for a in self.args]
        params.extend(f"{k}={v!r}" for k, v in self.kwargs.items())
        return f"{self.action}({', '.join(params)})"


@dataclass(frozen=True)
class KeySequenceStep:
    """A step that replays keys, written as space-separated key names."""

    keys: str
    pane: str | None = None
    description: str = ""

    @property
    def key_names(self) -> tuple[str, ...]:
        return tuple(self.keys.split())

    def describe(self) -> str:
        return self.description or f"keys {self.keys!r}"


@dataclass(frozen=True)
class ConfigOptionStep:
    """A step that changes one preference."""

    keyword: str
    value: Any = None

    def describe(self) -> str:
        if self.value is None:
            return f"option {self.keyword}"
        return f"option {self.keyword} {self.value!r}"


Step = CallableStep | ExpressionStep | KeySequenceStep | ConfigOptionStep

STEP_TYPES = (CallableStep, ExpressionStep, KeySequenceStep, ConfigOptionStep)


def describe_step(step: Any) -> str:
    """Human-readable description of any step."""
    if isinstance(step, STEP_TYPES):
        return step.describe()
    return repr(step)


# =============================================================================
# Step List
# =============================================================================


@dataclass(frozen=True)
class StepList:
    """
    The ordered script of one demonstration.

    Steps are addressed 1-based from the outside (step 1 is the first step)
    and stored 0-based. Configuration options collected by build_step_list()
    travel with the list and are applied before it is stored.

    Attributes:
        steps: The steps in playback order
        options: Configuration options to apply when the demonstration starts
    """

    steps: tuple[Step, ...] = ()
    options: tuple[ConfigOptionStep, ...] = ()

    def at(self, number: int) -> Step | None:
        """Return the step at a 1-based position, or None if there is none."""
        if number < 1 or number > len(self.steps):
            return None
        return self.steps[number - 1]

    def apply_options(self, preferences: Preferences) -> Preferences:
        """Return preferences with every collected option applied in order."""
        for opt in self.options:
            preferences = apply_option(preferences, opt.keyword, opt.value)
        return preferences

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __getitem__(self, index: int) -> Step:
        return self.steps[index]


# =============================================================================
# Constructors
# =============================================================================


def build_step_list(*forms: Any) -> StepList:
    """
    Build a StepList from an ordered list of forms.

    Forms are classified as:
        - ':keyword' strings: configuration options (valued keywords such as
          ':text-scale' take the next form as their value)
        - Step instances: kept as-is
        - tuples starting with a string: ExpressionStep(name, *args)
        - other callables: CallableStep
        - other strings: KeySequenceStep

    Raises:
        UnknownOptionError: If a keyword is not recognized
        InvalidStepError: If a form has none of the shapes above
        ValueError: If a valued keyword is missing its value
    """
    steps: list[Step] = []
    options: list[ConfigOptionStep] = []
    remaining = iter(enumerate(forms, start=1))

    for position, form in remaining:
        if is_option_keyword(form):
            value = None
            if form in VALUED_OPTION_KEYWORDS:
                try:
                    _, value = next(remaining)
                except StopIteration:
                    msg = f"{form} needs a value"
                    raise ValueError(msg) from None
            options.append(option(form, value))
        elif isinstance(form, STEP_TYPES):
            steps.append(form)
        elif isinstance(form, tuple) and form and isinstance(form[0], str):
            steps.append(ExpressionStep(action=form[0], args=tuple(form[1:])))
        elif callable(form):
            steps.append(CallableStep(func=form))
        elif isinstance(form, str):
            steps.append(KeySequenceStep(keys=form))
        else:
            raise InvalidStepError(step_number=position, step_type=type(form).__name__)

    return StepList(steps=tuple(steps), options=tuple(options))


def option(keyword: str, value: Any = None) -> ConfigOptionStep:
    """Create a ConfigOptionStep, rejecting unrecognized keywords."""
    # Validates the keyword and value against a throwaway copy
    apply_option(Preferences(), keyword, value)
    return ConfigOptionStep(keyword=keyword, value=value)


def expr(action: str, *args: Any, description: str = "", **kwargs: Any) -> ExpressionStep:
    """Create an ExpressionStep running a registered action."""
    return ExpressionStep(action=action, args=args, kwargs=kwargs, description=description)


def keys(sequence: str, pane: str | None = None) -> KeySequenceStep:
    """Create a KeySequenceStep, e.g. keys("C-x o")."""
    return KeySequenceStep(keys=sequence, pane=pane)


def typed(text: str, pane: str | None = None) -> CallableStep:
    """Create a CallableStep that types text with the typing simulation."""
    return CallableStep(
        func=partial(_type_into_active, text, pane),
        description=f"type {text!r}",
    )


def _type_into_active(text: str, pane: str | None) -> None:
    from demoreel.engine import active_sequencer  # noqa: PLC0415  # circular import

    active_sequencer().type_text(text, pane=pane)
