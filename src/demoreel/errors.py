"""
Exception hierarchy for demoreel.

All demoreel exceptions inherit from DemoError, allowing callers to catch
all demoreel-specific exceptions with a single except clause.

Exception Categories:
    - AlreadyRunningError / NotRunningError: Session state preconditions
    - StepExecutionError / InvalidStepError: A step failed during dispatch
    - UnknownOptionError / ScriptLoadError: Invalid demonstration script
    - RecordingActiveError / NotRecordingError: Keystroke recorder misuse
    - HostCommandError: A host collaborator call failed

Design Principles:
    - All errors have error codes for programmatic handling
    - All errors include context (step, action, keyword where applicable)
    - All errors provide actionable suggestions where possible
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Session errors: 1xxx
ERROR_SESSION_ALREADY_RUNNING = 1001
ERROR_SESSION_NOT_RUNNING = 1002

# Step errors: 2xxx
ERROR_STEP_EXECUTION_FAILED = 2001
ERROR_STEP_INVALID = 2002
ERROR_ACTION_NOT_FOUND = 2003
ERROR_ACTION_INVALID_ARGS = 2004

# Script errors: 3xxx
ERROR_SCRIPT_UNKNOWN_OPTION = 3001
ERROR_SCRIPT_LOAD_FAILED = 3002

# Recorder errors: 4xxx
ERROR_RECORDING_ACTIVE = 4001
ERROR_NOT_RECORDING = 4002

# Host errors: 5xxx
ERROR_HOST_COMMAND_FAILED = 5001


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class DemoError(Exception):
    """
    Base exception for all demoreel errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Session Errors
# =============================================================================


@dataclass
class AlreadyRunningError(DemoError):
    """Raised when start() is called while a demonstration is running."""

    current_step: int = 0

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"A demonstration is already running (at step {self.current_step})"
        if self.code == 0:
            self.code = ERROR_SESSION_ALREADY_RUNNING
        if not self.suggestion:
            self.suggestion = "End the running demonstration before starting another"
        self.context["current_step"] = self.current_step


@dataclass
class NotRunningError(DemoError):
    """Raised when an operator command needs a running demonstration."""

    command: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"No demonstration is running ({self.command})"
        if self.code == 0:
            self.code = ERROR_SESSION_NOT_RUNNING
        self.context["command"] = self.command


# =============================================================================
# Step Errors
# =============================================================================


@dataclass
class StepError(DemoError):
    """
    Base class for errors raised while dispatching a step.

    These errors are caught at the dispatch boundary, shown to the
    operator, and end the session.

    Attributes:
        step_number: 1-based position of the failing step
        description: Human-readable description of the step
    """

    step_number: int = 0
    description: str = ""

    def __post_init__(self) -> None:
        self.context.update({
            "step_number": self.step_number,
            "description": self.description,
        })


@dataclass
class StepExecutionError(StepError):
    """Raised when the body of a step fails."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Step {self.step_number} ({self.description}) failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STEP_EXECUTION_FAILED
        if not self.suggestion:
            self.suggestion = "Fix the cause, restart the demonstration and re-run the step"
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class InvalidStepError(StepError):
    """Raised when a step is not one of the known step variants."""

    step_type: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Step {self.step_number} has an unsupported type: {self.step_type}"
        if self.code == 0:
            self.code = ERROR_STEP_INVALID
        super().__post_init__()
        self.context["step_type"] = self.step_type


@dataclass
class ActionNotFoundError(DemoError):
    """Raised when an expression step names an unregistered action."""

    action: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Action not found: {self.action}"
        if self.code == 0:
            self.code = ERROR_ACTION_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "Check the action name spelling or register the action"
        self.context["action"] = self.action


@dataclass
class ActionArgumentError(DemoError):
    """Raised when an action receives arguments it cannot use."""

    action: str = ""
    validation_error: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Invalid arguments for {self.action}: {self.validation_error}"
        if self.code == 0:
            self.code = ERROR_ACTION_INVALID_ARGS
        self.context.update({
            "action": self.action,
            "validation_error": self.validation_error,
        })


# =============================================================================
# Script Errors
# =============================================================================


@dataclass
class UnknownOptionError(DemoError):
    """Raised when a script uses a configuration keyword nobody recognizes."""

    keyword: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Unknown configuration option: {self.keyword}"
        if self.code == 0:
            self.code = ERROR_SCRIPT_UNKNOWN_OPTION
        if not self.suggestion:
            self.suggestion = "Run 'demoreel check' to list the recognized options"
        self.context["keyword"] = self.keyword


@dataclass
class ScriptLoadError(DemoError):
    """Raised when a script file cannot be read or validated."""

    path: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Cannot load script {self.path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_SCRIPT_LOAD_FAILED
        self.context.update({
            "path": self.path,
            "underlying_error": self.underlying_error,
        })


# =============================================================================
# Recorder Errors
# =============================================================================


@dataclass
class RecordingActiveError(DemoError):
    """Raised when a recording is started while another one is active."""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = "A keystroke recording is already active"
        if self.code == 0:
            self.code = ERROR_RECORDING_ACTIVE
        if not self.suggestion:
            self.suggestion = "Commit or cancel the active recording first"


@dataclass
class NotRecordingError(DemoError):
    """Raised when keys or commit/cancel events arrive with no recording active."""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = "No keystroke recording is active"
        if self.code == 0:
            self.code = ERROR_NOT_RECORDING


# =============================================================================
# Host Errors
# =============================================================================


@dataclass
class HostCommandError(DemoError):
    """Raised when a host collaborator command fails."""

    command: str = ""
    stderr: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Host command failed: {self.command}: {self.stderr}"
        if self.code == 0:
            self.code = ERROR_HOST_COMMAND_FAILED
        self.context.update({
            "command": self.command,
            "stderr": self.stderr,
        })
