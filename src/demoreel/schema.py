"""
Schema definitions for demoreel.

This module defines the enums and Pydantic models used throughout demoreel:
- RunMode/KeymapMode: Session state and key-binding profiles
- Preferences: Engine and view preferences altered by configuration keywords
- TypingProfile: Pacing used by the typing simulation
- Script/ScriptStep: The YAML demonstration script format

Design Decisions:
    - Models are immutable (frozen=True); preference changes produce copies
    - Unknown fields are rejected (extra="forbid")
    - Configuration keywords map to exactly one preference field each
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from demoreel.errors import UnknownOptionError


# =============================================================================
# Enums
# =============================================================================


class RunMode(str, Enum):
    """State of the sequencer: idle or running with a key-binding profile."""

    IDLE = "idle"
    SIMPLE = "simple"
    ADVANCED = "advanced"


class KeymapMode(str, Enum):
    """Key-binding profile requested for a running demonstration."""

    SIMPLE = "simple"
    ADVANCED = "advanced"


class PaneLayout(str, Enum):
    """Pane arrangement applied when a demonstration starts."""

    SINGLE = "single"
    MULTI = "multi"


class ScreenMode(str, Enum):
    """Whether the host window goes full-screen for the demonstration."""

    FULL = "full"
    WINDOWED = "windowed"


class TypingSpeed(str, Enum):
    """Named typing-speed profiles."""

    INSTANT = "instant"
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"


class SplitOrientation(str, Enum):
    """Where new panes open relative to the current one."""

    SIDE = "side"
    BELOW = "below"


class StepStatus(str, Enum):
    """Outcome of advancing the sequencer."""

    SUCCESS = "success"
    FAILED = "failed"
    FINISHED = "finished"
    MISSING = "missing"


# =============================================================================
# Typing Profiles
# =============================================================================


@dataclass(frozen=True)
class TypingProfile:
    """
    Per-character pacing for the typing simulation.

    Each character waits floor_ms plus a uniform random value in
    [0, ceiling_ms] milliseconds. An instant profile never waits.
    """

    floor_ms: int = 0
    ceiling_ms: int = 0
    instant: bool = False


TYPING_PROFILES: dict[TypingSpeed, TypingProfile] = {
    TypingSpeed.INSTANT: TypingProfile(instant=True),
    TypingSpeed.FAST: TypingProfile(floor_ms=5, ceiling_ms=40),
    TypingSpeed.MEDIUM: TypingProfile(floor_ms=30, ceiling_ms=200),
    TypingSpeed.SLOW: TypingProfile(floor_ms=80, ceiling_ms=600),
}


# =============================================================================
# Preferences
# =============================================================================


class Preferences(BaseModel):
    """
    Engine and view preferences for one demonstration.

    Attributes:
        keymap_mode: Key-binding profile used when start() gets no mode
        layout: Collapse to a single pane on start, or keep the current panes
        screen: Go full-screen on start, or stay windowed
        typing_speed: Profile used by the typing simulation
        split: Orientation for new panes
        text_scale: Font scale increment used when loading files
        show_status_line: Whether pane status lines stay visible
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    keymap_mode: KeymapMode = Field(default=KeymapMode.SIMPLE)
    layout: PaneLayout = Field(default=PaneLayout.MULTI)
    screen: ScreenMode = Field(default=ScreenMode.WINDOWED)
    typing_speed: TypingSpeed = Field(default=TypingSpeed.MEDIUM)
    split: SplitOrientation = Field(default=SplitOrientation.SIDE)
    text_scale: int = Field(default=0)
    show_status_line: bool = Field(default=True)

    @property
    def typing_profile(self) -> TypingProfile:
        """The pacing profile for the current typing speed."""
        return TYPING_PROFILES[self.typing_speed]


# Keyword -> (preference field, value)
OPTION_KEYWORDS: dict[str, tuple[str, Any]] = {
    ":simple-mode": ("keymap_mode", KeymapMode.SIMPLE),
    ":advanced-mode": ("keymap_mode", KeymapMode.ADVANCED),
    ":single-pane": ("layout", PaneLayout.SINGLE),
    ":multi-pane": ("layout", PaneLayout.MULTI),
    ":fullscreen": ("screen", ScreenMode.FULL),
    ":windowed": ("screen", ScreenMode.WINDOWED),
    ":insert-instant": ("typing_speed", TypingSpeed.INSTANT),
    ":insert-fast": ("typing_speed", TypingSpeed.FAST),
    ":insert-medium": ("typing_speed", TypingSpeed.MEDIUM),
    ":insert-slow": ("typing_speed", TypingSpeed.SLOW),
    ":panes-on-side": ("split", SplitOrientation.SIDE),
    ":panes-below": ("split", SplitOrientation.BELOW),
    ":show-status-line": ("show_status_line", True),
    ":hide-status-line": ("show_status_line", False),
}

# Keywords that take the following form as their value
VALUED_OPTION_KEYWORDS: dict[str, str] = {
    ":text-scale": "text_scale",
}


def is_option_keyword(form: Any) -> bool:
    """Whether a form has the shape of a configuration keyword (':name')."""
    if not isinstance(form, str) or len(form) < 2 or not form.startswith(":"):
        return False
    return all(ch.isalnum() or ch == "-" for ch in form[1:])


def apply_option(preferences: Preferences, keyword: str, value: Any = None) -> Preferences:
    """
    Return a copy of preferences with one configuration keyword applied.

    Args:
        preferences: The preferences to start from
        keyword: A recognized keyword such as ':advanced-mode'
        value: The value for valued keywords such as ':text-scale'

    Returns:
        New Preferences with exactly one field changed

    Raises:
        UnknownOptionError: If the keyword is not recognized
        ValueError: If a valued keyword gets a non-integer value
    """
    if keyword in OPTION_KEYWORDS:
        field_name, field_value = OPTION_KEYWORDS[keyword]
        return preferences.model_copy(update={field_name: field_value})

    if keyword in VALUED_OPTION_KEYWORDS:
        if not isinstance(value, int) or isinstance(value, bool):
            msg = f"{keyword} needs an integer value, got {value!r}"
            raise ValueError(msg)
        return preferences.model_copy(update={VALUED_OPTION_KEYWORDS[keyword]: value})

    raise UnknownOptionError(keyword=keyword)


def check_text_keys(texts: dict[str, str]) -> dict[str, str]:
    """Predefined texts are looked up by a single character."""
    for key in texts:
        if len(key) != 1:
            msg = f"Predefined text keys must be single characters: {key!r}"
            raise ValueError(msg)
    return texts


def recognized_keywords() -> list[str]:
    """All recognized configuration keywords, sorted."""
    return sorted([*OPTION_KEYWORDS, *VALUED_OPTION_KEYWORDS])


# =============================================================================
# Script Models
# =============================================================================


class ScriptOption(BaseModel):
    """A configuration keyword with a value, e.g. {option: text-scale, value: 2}."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    option: str = Field(..., min_length=1)
    value: int | None = Field(default=None)


class ScriptStep(BaseModel):
    """
    One step of a YAML demonstration script.

    Exactly one of action, keys, type or option must be given.

    Attributes:
        action: Registered action name (e.g. "file.load")
        args: Keyword arguments for the action
        keys: Key sequence to replay (e.g. "C-x o")
        type: Text to type with the typing simulation
        pane: Target pane for typed text
        option: Configuration keyword applied when the step runs
        value: Value for a valued configuration keyword
        name: Optional human-readable description
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    action: str | None = Field(default=None, min_length=1)
    args: dict[str, Any] = Field(default_factory=dict)
    keys: str | None = Field(default=None, min_length=1)
    type: str | None = Field(default=None)
    pane: str | None = Field(default=None)
    option: str | None = Field(default=None, min_length=1)
    value: int | None = Field(default=None)
    name: str | None = Field(default=None)

    @field_validator("action")
    @classmethod
    def validate_action_format(cls, v: str | None) -> str | None:
        """Action names are dotted identifiers with dashes or underscores."""
        if v is None:
            return v
        for part in v.split("."):
            if not part.replace("_", "").replace("-", "").isalnum():
                msg = f"Invalid action name format: {v}"
                raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_single_kind(self) -> "ScriptStep":
        """Each step is exactly one kind of step."""
        kinds = [
            name
            for name in ("action", "keys", "type", "option")
            if getattr(self, name) is not None
        ]
        if len(kinds) != 1:
            msg = f"A step needs exactly one of action, keys, type or option (got {kinds or 'none'})"
            raise ValueError(msg)
        if self.args and self.action is None:
            msg = "'args' is only valid with 'action'"
            raise ValueError(msg)
        return self


class Script(BaseModel):
    """
    A complete YAML demonstration script.

    Attributes:
        version: Schema version for forward compatibility
        name: Optional name for this demonstration
        description: Optional description
        options: Configuration keywords applied when the demonstration starts
        texts: Predefined texts typed by key during the demonstration
        steps: Ordered steps, one per operator gesture
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(default="1.0")
    name: str | None = Field(default=None)
    description: str | None = Field(default=None)
    options: list[str | ScriptOption] = Field(default_factory=list)
    texts: dict[str, str] = Field(default_factory=dict)
    steps: list[ScriptStep] = Field(..., min_length=1)

    @field_validator("texts")
    @classmethod
    def validate_text_keys(cls, v: dict[str, str]) -> dict[str, str]:
        return check_text_keys(v)
