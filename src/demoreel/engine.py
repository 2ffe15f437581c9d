"""
Step Sequencer Engine for demoreel.

The Sequencer plays a StepList back one step per operator gesture. It
coordinates between:
- Host: panes, files, shells and keystrokes of the presentation
- Operator: notifications and acknowledgement prompts
- ActionRegistry: named actions run by expression steps
- CheckpointStore: global settings overridden during the session

Session Flow:
    1. start() snapshots the layout, applies options, activates a keymap
       and runs step 1
    2. Each advance() moves the cursor (by one, or to an explicit step)
       and dispatches the step found there
    3. Advancing past the last step waits for one acknowledgement, then
       ends the session
    4. end() deactivates the keymap, reverses display changes, restores
       the layout and drains the checkpoint store

Design Principles:
    - Abort-and-restore: a failing step is shown to the operator, then the
      session ends; after a manual fix, re_advance() retries that step and
      resumes the session
    - Explicit state: everything lives in an injected DemoContext
    - Single-threaded: each call runs to completion on the calling thread
"""

import logging
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

from demoreel.actions import ActionContext, ActionRegistry, default_registry
from demoreel.checkpoint import CheckpointStore
from demoreel.errors import (
    AlreadyRunningError,
    InvalidStepError,
    NotRunningError,
    StepError,
    StepExecutionError,
)
from demoreel.host.base import Host, Operator
from demoreel.keymap import Keymap, OperatorCommand, keymap_for
from demoreel.schema import (
    KeymapMode,
    PaneLayout,
    Preferences,
    RunMode,
    ScreenMode,
    StepStatus,
    apply_option,
)
from demoreel.steps import (
    CallableStep,
    ConfigOptionStep,
    ExpressionStep,
    KeySequenceStep,
    Step,
    StepList,
    describe_step,
)
from demoreel.typist import Pacer, type_text

LOG = logging.getLogger(__name__)

_ACTIVE: ContextVar["Sequencer"] = ContextVar("demoreel_active_sequencer")


def active_sequencer() -> "Sequencer":
    """
    The sequencer currently dispatching a step.

    Callable steps take no arguments; this is how their bodies reach the
    engine (for example to type text).

    Raises:
        NotRunningError: If called outside of step dispatch
    """
    try:
        return _ACTIVE.get()
    except LookupError:
        raise NotRunningError(command="active_sequencer") from None


@dataclass
class DemoContext:
    """
    State of one demonstration, owned by the host application.

    Attributes:
        steps: The script being played
        current_step: 1-based number of the last dispatched step (0 = none)
        mode: IDLE, or the key-binding profile of the running session
        defaults: Preferences before script options are applied
        preferences: Preferences of the running session
        checkpoints: Global settings overridden during the session
        original_layout: Host layout snapshot taken by start()
        keymap: Active keymap, None when key bindings are disabled
        keymap_mode: Key-binding profile last activated, used when a failed
            step is retried with re_advance()
        texts: Predefined texts typed by key
    """

    steps: StepList = field(default_factory=StepList)
    current_step: int = 0
    mode: RunMode = RunMode.IDLE
    defaults: Preferences = field(default_factory=Preferences)
    preferences: Preferences = field(default_factory=Preferences)
    checkpoints: CheckpointStore = field(default_factory=CheckpointStore)
    original_layout: Any = None
    keymap: Keymap | None = None
    keymap_mode: KeymapMode = KeymapMode.SIMPLE
    texts: dict[str, str] = field(default_factory=dict)

    @property
    def running(self) -> bool:
        return self.mode != RunMode.IDLE


@dataclass
class StepResult:
    """
    Result of advancing the sequencer.

    Attributes:
        step_number: 1-based position that was resolved
        status: SUCCESS, FAILED, FINISHED (past the end) or MISSING
        description: Human-readable description of the step
        error: The error shown to the operator, for FAILED results
    """

    step_number: int
    status: StepStatus
    description: str = ""
    error: StepError | None = None

    @property
    def success(self) -> bool:
        return self.status == StepStatus.SUCCESS


class Sequencer:
    """
    Plays a StepList back one step per operator gesture.

    Usage:
        sequencer = Sequencer(host, operator)
        sequencer.start(build_step_list(":fullscreen", ("title.show", "intro.txt")))
        sequencer.advance()
        sequencer.end()

    Attributes:
        host: The presentation environment
        operator: The presenter at the keyboard
        context: The demonstration state
        registry: Actions available to expression steps
        pacer: Delay strategy for the typing simulation
    """

    def __init__(
        self,
        host: Host,
        operator: Operator,
        context: DemoContext | None = None,
        registry: ActionRegistry | None = None,
        pacer: Pacer | None = None,
    ) -> None:
        self.host = host
        self.operator = operator
        self.context = context or DemoContext(checkpoints=CheckpointStore(host.settings))
        self.registry = registry or default_registry
        self.pacer = pacer or Pacer()

    @property
    def running(self) -> bool:
        return self.context.running

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    def start(self, steps: StepList | None = None, advanced: bool | None = None) -> StepResult:
        """
        Start a demonstration and run its first step.

        Args:
            steps: Replacement script (default: keep the context's script)
            advanced: Key-binding mode; None uses the keymap_mode preference

        Returns:
            StepResult of step 1

        Raises:
            AlreadyRunningError: If a demonstration is already running
        """
        ctx = self.context
        if ctx.running:
            raise AlreadyRunningError(current_step=ctx.current_step)

        script = steps if steps is not None else ctx.steps
        preferences = script.apply_options(ctx.defaults)

        ctx.original_layout = self.host.snapshot_layout()
        ctx.current_step = 0
        ctx.preferences = preferences
        ctx.steps = script

        if advanced is None:
            mode = preferences.keymap_mode
        else:
            mode = KeymapMode.ADVANCED if advanced else KeymapMode.SIMPLE
        self._activate(mode)
        LOG.info("Demonstration started: %d steps, %s mode", len(script), mode.value)

        try:
            self._apply_startup_preferences(preferences)
        except Exception:
            self.end()
            raise

        return self.advance()

    def end(self) -> None:
        """
        End the demonstration and put the environment back.

        Safe to call when idle. Checkpointed settings are restored even if
        a host call fails.
        """
        ctx = self.context
        ctx.keymap = None
        ctx.mode = RunMode.IDLE
        try:
            self.host.set_fullscreen(False)
            self.host.set_status_line(True)
            if ctx.original_layout is not None:
                self.host.restore_layout(ctx.original_layout)
        finally:
            ctx.original_layout = None
            ctx.checkpoints.restore_all()
        LOG.info("Demonstration ended at step %d", ctx.current_step)

    def disable_mode(self) -> None:
        """Deactivate key bindings without ending the demonstration."""
        self.context.keymap = None

    def enable_mode(self) -> None:
        """Reactivate the key bindings of the running demonstration."""
        self._require_running("enable-mode")
        self._activate(KeymapMode(self.context.mode.value))

    # -------------------------------------------------------------------------
    # Stepping
    # -------------------------------------------------------------------------

    def advance(self, step: int | None = None) -> StepResult:
        """
        Move to the next step, or to an explicit 1-based step, and run it.

        Jumping is not bounds-checked: a step past the end behaves like
        running off the end of the script.

        Raises:
            NotRunningError: If no demonstration is running
        """
        self._require_running("advance")
        ctx = self.context
        ctx.current_step = step if step is not None else ctx.current_step + 1
        return self._run_current()

    def re_advance(self) -> StepResult:
        """
        Run the current step again without moving the cursor.

        After a failed step has ended the demonstration, the operator fixes
        the problem and re-advances: the failed step runs again and the
        demonstration resumes from there.

        Raises:
            NotRunningError: If idle with no step at the current position
        """
        ctx = self.context
        current = ctx.steps.at(ctx.current_step)
        if not ctx.running:
            if current is None:
                raise NotRunningError(command="re-advance")
            self._resume()
        elif current is None:
            self.operator.notify("No step to re-run: the demonstration is complete.")
            return StepResult(step_number=ctx.current_step, status=StepStatus.MISSING)
        return self.dispatch(current)

    def show_current_step(self) -> str:
        """Report the current step to the operator without running it."""
        self._require_running("show-step")
        ctx = self.context
        current = ctx.steps.at(ctx.current_step)
        description = describe_step(current) if current is not None else "(none)"
        message = f"Step {ctx.current_step} of {len(ctx.steps)}: {description}"
        self.operator.notify(message)
        return message

    def _run_current(self) -> StepResult:
        ctx = self.context
        current = ctx.steps.at(ctx.current_step)
        if current is None:
            self.operator.acknowledge(
                f"End of demonstration ({len(ctx.steps)} steps). Press any key to finish."
            )
            self.end()
            return StepResult(step_number=ctx.current_step, status=StepStatus.FINISHED)
        return self.dispatch(current)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def dispatch(self, step: Step) -> StepResult:
        """
        Run one step.

        Any failure is shown to the operator, who must acknowledge it, and
        then the demonstration ends.
        """
        number = self.context.current_step
        description = describe_step(step)
        LOG.debug("Dispatching step %d: %s", number, description)

        token = _ACTIVE.set(self)
        try:
            self._execute(step, number)
        except Exception as e:
            if isinstance(e, StepError):
                error = e
            else:
                error = StepExecutionError(
                    step_number=number,
                    description=description,
                    underlying_error=str(e) or type(e).__name__,
                )
            LOG.error("Step %d failed: %s", number, description, exc_info=True)
            self.operator.acknowledge(str(error))
            self.end()
            return StepResult(
                step_number=number,
                status=StepStatus.FAILED,
                description=description,
                error=error,
            )
        finally:
            _ACTIVE.reset(token)

        return StepResult(step_number=number, status=StepStatus.SUCCESS, description=description)

    def _execute(self, step: Step, number: int) -> None:
        if isinstance(step, CallableStep):
            step.func()
        elif isinstance(step, ExpressionStep):
            action = self.registry.get(step.action)
            action.execute(step.args, step.kwargs, self._action_context())
        elif isinstance(step, KeySequenceStep):
            self.host.send_keys(step.key_names, pane=step.pane)
        elif isinstance(step, ConfigOptionStep):
            self._apply_option(step)
        else:
            raise InvalidStepError(
                step_number=number,
                description=describe_step(step),
                step_type=type(step).__name__,
            )

    def _apply_option(self, step: ConfigOptionStep) -> None:
        ctx = self.context
        before = ctx.preferences
        ctx.preferences = apply_option(before, step.keyword, step.value)
        if ctx.preferences.keymap_mode != before.keymap_mode:
            self._activate(ctx.preferences.keymap_mode)

    def _action_context(self) -> ActionContext:
        return ActionContext(
            host=self.host,
            operator=self.operator,
            preferences=self.context.preferences,
            checkpoints=self.context.checkpoints,
            sequencer=self,
        )

    # -------------------------------------------------------------------------
    # Typing
    # -------------------------------------------------------------------------

    def type_text(self, text: str, pane: str | None = None) -> None:
        """Type text into a pane, paced by the current typing profile."""
        type_text(
            text,
            lambda char: self.host.type_char(char, pane=pane),
            self.context.preferences.typing_profile,
            self.pacer,
        )

    def insert_predefined_text(self, key: str) -> bool:
        """
        Type the predefined text stored under a single key.

        Returns:
            False if there is no text for the key
        """
        self._require_running("insert-text")
        text = self.context.texts.get(key)
        if text is None:
            self.operator.notify(f"No predefined text for key {key!r}")
            return False
        self.type_text(text)
        return True

    # -------------------------------------------------------------------------
    # Operator commands
    # -------------------------------------------------------------------------

    def perform(self, command: OperatorCommand, argument: Any = None) -> StepResult | None:
        """
        Run an operator command from the active keymap.

        Args:
            command: The command bound to the key that was pressed
            argument: Step number for JUMP, text key for INSERT_TEXT and
                ADVANCE_AND_INSERT
        """
        if command == OperatorCommand.ADVANCE:
            return self.advance()
        if command == OperatorCommand.ADVANCE_AND_INSERT:
            result = self.advance()
            if result.success:
                self.insert_predefined_text(str(argument))
            return result
        if command == OperatorCommand.JUMP:
            return self.advance(int(argument))
        if command == OperatorCommand.RE_ADVANCE:
            return self.re_advance()
        if command == OperatorCommand.SHOW_STEP:
            self.show_current_step()
        elif command == OperatorCommand.INSERT_TEXT:
            self.insert_predefined_text(str(argument))
        elif command == OperatorCommand.DISABLE_MODE:
            self.disable_mode()
        elif command == OperatorCommand.END:
            self.end()
        return None

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _activate(self, mode: KeymapMode) -> None:
        self.context.mode = RunMode(mode.value)
        self.context.keymap = keymap_for(mode)
        self.context.keymap_mode = mode

    def _resume(self) -> None:
        ctx = self.context
        ctx.original_layout = self.host.snapshot_layout()
        self._activate(ctx.keymap_mode)
        LOG.info("Demonstration resumed at step %d", ctx.current_step)
        if ctx.preferences.screen == ScreenMode.FULL:
            self.host.set_fullscreen(True)
        if not ctx.preferences.show_status_line:
            self.host.set_status_line(False)

    def _apply_startup_preferences(self, preferences: Preferences) -> None:
        if preferences.layout == PaneLayout.SINGLE:
            self.host.single_pane()
        if preferences.screen == ScreenMode.FULL:
            self.host.set_fullscreen(True)
        if not preferences.show_status_line:
            self.host.set_status_line(False)

    def _require_running(self, command: str) -> None:
        if not self.context.running:
            raise NotRunningError(command=command)
