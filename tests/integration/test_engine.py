"""
Integration tests for the Sequencer.

These tests play whole step lists against the fake host and operator:
- Stepping, jumping and running off the end
- Failing steps ending the session and restoring state
- Checkpointed settings restored on end
- Options, key-binding modes, typed text and predefined texts
"""

import pytest

from demoreel.checkpoint import CheckpointStore
from demoreel.engine import DemoContext, Sequencer, active_sequencer
from demoreel.errors import (
    AlreadyRunningError,
    HostCommandError,
    InvalidStepError,
    NotRunningError,
    StepExecutionError,
)
from demoreel.keymap import ADVANCED_KEYMAP, SIMPLE_KEYMAP, OperatorCommand
from demoreel.schema import KeymapMode, RunMode, StepStatus, TypingSpeed
from demoreel.steps import StepList, build_step_list, option, typed


@pytest.fixture
def ran() -> list[str]:
    return []


@pytest.fixture
def abc(ran: list[str]) -> StepList:
    def a() -> None:
        ran.append("A")

    def b() -> None:
        ran.append("B")

    def c() -> None:
        ran.append("C")

    return build_step_list(a, b, c)


class TestStepping:
    """Tests for start(), advance() and running off the end."""

    def test_start_runs_first_step(self, sequencer: Sequencer, abc: StepList, ran: list[str]) -> None:
        result = sequencer.start(abc)
        assert result.status == StepStatus.SUCCESS
        assert result.step_number == 1
        assert ran == ["A"]
        assert sequencer.running
        assert sequencer.context.current_step == 1

    def test_n_plus_one_advances_end_the_session(
        self, sequencer: Sequencer, operator, host, abc: StepList, ran: list[str]
    ) -> None:
        """Three steps run in order; the fourth gesture asks for acknowledgement and ends."""
        sequencer.start(abc)
        sequencer.advance()
        sequencer.advance()
        assert ran == ["A", "B", "C"]
        assert operator.acknowledgements == []

        result = sequencer.advance()

        assert result.status == StepStatus.FINISHED
        assert len(operator.acknowledgements) == 1
        assert "End of demonstration" in operator.acknowledgements[0]
        assert not sequencer.running
        assert sequencer.context.keymap is None
        assert host.methods()[-1] == "restore_layout"
        assert ran == ["A", "B", "C"]

    def test_start_while_running(self, sequencer: Sequencer, abc: StepList, ran: list[str]) -> None:
        """A second start is rejected and leaves the session untouched."""
        sequencer.start(abc)
        sequencer.advance()

        with pytest.raises(AlreadyRunningError) as exc_info:
            sequencer.start(build_step_list("C-l"))

        assert exc_info.value.current_step == 2
        assert sequencer.context.current_step == 2
        assert sequencer.context.steps is abc
        assert sequencer.running
        assert ran == ["A", "B"]

    def test_jump(self, sequencer: Sequencer, abc: StepList, ran: list[str]) -> None:
        sequencer.start(abc)
        result = sequencer.advance(3)
        assert result.step_number == 3
        assert ran == ["A", "C"]
        assert sequencer.advance().status == StepStatus.FINISHED

    def test_jump_backwards(self, sequencer: Sequencer, abc: StepList, ran: list[str]) -> None:
        sequencer.start(abc)
        sequencer.advance(3)
        sequencer.advance(1)
        sequencer.advance()
        assert ran == ["A", "C", "A", "B"]

    def test_jump_past_end(self, sequencer: Sequencer, abc: StepList, operator) -> None:
        sequencer.start(abc)
        assert sequencer.advance(10).status == StepStatus.FINISHED
        assert not sequencer.running

    def test_re_advance(self, sequencer: Sequencer, abc: StepList, ran: list[str]) -> None:
        sequencer.start(abc)
        sequencer.advance()
        result = sequencer.re_advance()
        assert result.step_number == 2
        assert ran == ["A", "B", "B"]
        assert sequencer.context.current_step == 2

    def test_re_advance_without_step(self, sequencer: Sequencer, abc: StepList, operator) -> None:
        sequencer.start(abc)
        sequencer.context.current_step = 7
        assert sequencer.re_advance().status == StepStatus.MISSING
        assert operator.notifications
        assert sequencer.running

    def test_empty_script_finishes_immediately(self, sequencer: Sequencer, operator) -> None:
        result = sequencer.start(build_step_list())
        assert result.status == StepStatus.FINISHED
        assert not sequencer.running

    def test_show_current_step(self, sequencer: Sequencer, abc: StepList, operator) -> None:
        sequencer.start(abc)
        message = sequencer.show_current_step()
        assert message == "Step 1 of 3: call a"
        assert operator.notifications == [message]

    def test_commands_when_idle(self, sequencer: Sequencer) -> None:
        with pytest.raises(NotRunningError):
            sequencer.advance()
        with pytest.raises(NotRunningError):
            sequencer.re_advance()
        with pytest.raises(NotRunningError):
            sequencer.show_current_step()

    def test_end_when_idle_is_safe(self, sequencer: Sequencer, host) -> None:
        sequencer.end()
        sequencer.end()
        assert not sequencer.running
        assert "restore_layout" not in host.methods()

    def test_restart_after_end(self, sequencer: Sequencer, abc: StepList, ran: list[str]) -> None:
        sequencer.start(abc)
        sequencer.end()
        sequencer.start()
        assert ran == ["A", "A"]


class TestFailures:
    """Tests for steps that fail."""

    def test_failing_step_ends_and_restores(self, sequencer: Sequencer, host, operator, ran: list[str]) -> None:
        """When B fails, the operator sees the error, the layout comes back, C never runs."""

        def a() -> None:
            ran.append("A")
            host.panes.append("%9")

        def b() -> None:
            raise RuntimeError("network is down")

        def c() -> None:
            ran.append("C")

        sequencer.start(build_step_list(a, b, c))
        result = sequencer.advance()

        assert result.status == StepStatus.FAILED
        assert isinstance(result.error, StepExecutionError)
        assert result.error.step_number == 2
        assert "network is down" in operator.acknowledgements[0]
        assert "[E2001]" in operator.acknowledgements[0]
        assert not sequencer.running
        assert host.panes == ["%0"]
        assert ran == ["A"]

    def test_re_advance_retries_failed_step(
        self, sequencer: Sequencer, host, ran: list[str]
    ) -> None:
        """After a failure ends the session, re-advancing re-runs that step and resumes."""
        attempts: list[int] = []

        def flaky() -> None:
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("first try")
            ran.append("ok")

        steps = build_step_list(":advanced-mode", ":fullscreen", lambda: ran.append("A"), flaky, "C-l")
        sequencer.start(steps)
        assert sequencer.advance().status == StepStatus.FAILED
        assert not sequencer.running

        result = sequencer.re_advance()

        assert result.status == StepStatus.SUCCESS
        assert result.step_number == 2
        assert ran == ["A", "ok"]
        assert sequencer.running
        assert sequencer.context.mode == RunMode.ADVANCED
        assert sequencer.context.keymap is ADVANCED_KEYMAP
        assert host.fullscreen
        assert sequencer.advance().step_number == 3

    def test_re_advance_failing_again_ends_session(self, sequencer: Sequencer, host, operator) -> None:
        def broken() -> None:
            raise RuntimeError("still broken")

        sequencer.start(build_step_list(broken))
        result = sequencer.re_advance()

        assert result.status == StepStatus.FAILED
        assert not sequencer.running
        assert len(operator.acknowledgements) == 2
        assert host.methods().count("restore_layout") == 2

    def test_unknown_action(self, sequencer: Sequencer, operator) -> None:
        result = sequencer.start(build_step_list(("file.lode", "x.txt")))
        assert result.status == StepStatus.FAILED
        assert "file.lode" in result.error.message
        assert not sequencer.running

    def test_bad_action_arguments(self, sequencer: Sequencer) -> None:
        result = sequencer.start(build_step_list(("title.show",)))
        assert result.status == StepStatus.FAILED
        assert "title.show" in result.error.message

    def test_invalid_step(self, sequencer: Sequencer, operator) -> None:
        """Objects that are not step variants fail with InvalidStepError."""
        result = sequencer.start(StepList(steps=(42,)))
        assert result.status == StepStatus.FAILED
        assert isinstance(result.error, InvalidStepError)
        assert result.error.step_type == "int"
        assert not sequencer.running

    def test_host_failure_in_step(self, sequencer: Sequencer, host) -> None:
        host.fail_on.add("send_keys")
        result = sequencer.start(build_step_list("C-l"))
        assert result.status == StepStatus.FAILED
        assert "simulated failure" in result.error.message

    def test_startup_failure_ends_session(self, host, operator, pacer) -> None:
        """A failing start-up preference propagates, leaving nothing running."""
        host.fail_on.add("single_pane")
        sequencer = Sequencer(host, operator, pacer=pacer)
        with pytest.raises(HostCommandError):
            sequencer.start(build_step_list(":single-pane", "C-l"))
        assert not sequencer.running
        assert "restore_layout" in host.methods()


class TestCheckpoints:
    """Tests for settings restored when the session ends."""

    def test_unbound_setting_is_unbound_again(self, sequencer: Sequencer, host) -> None:
        sequencer.start(build_step_list(("settings.set", "X", 1), "C-l"))
        assert host.settings.mapping == {"X": 1}
        sequencer.end()
        assert "X" not in host.settings.mapping

    def test_settings_restored_after_failure(self, sequencer: Sequencer, host) -> None:
        host.settings.mapping["status"] = "on"

        def boom() -> None:
            raise RuntimeError("boom")

        sequencer.start(build_step_list(("settings.set", "status", "off", "X", 2), boom))
        sequencer.advance()

        assert host.settings.mapping == {"status": "on"}
        assert len(sequencer.context.checkpoints) == 0

    def test_restored_even_if_layout_restore_fails(self, sequencer: Sequencer, host) -> None:
        sequencer.start(build_step_list(("settings.set", "X", 1)))
        host.fail_on.add("restore_layout")
        with pytest.raises(HostCommandError):
            sequencer.end()
        assert "X" not in host.settings.mapping


class TestPreferences:
    """Tests for options and key-binding modes."""

    def test_startup_options(self, sequencer: Sequencer, host) -> None:
        sequencer.start(build_step_list(":single-pane", ":fullscreen", ":hide-status-line", "C-l"))
        assert host.methods()[:4] == ["snapshot_layout", "single_pane", "set_fullscreen", "set_status_line"]
        assert host.fullscreen
        assert not host.status_line

        sequencer.end()
        assert not host.fullscreen
        assert host.status_line

    def test_defaults_survive_sessions(self, sequencer: Sequencer) -> None:
        """Script options apply to one session; defaults stay untouched."""
        sequencer.start(build_step_list(":insert-slow", "C-l"))
        assert sequencer.context.preferences.typing_speed == TypingSpeed.SLOW
        sequencer.end()
        assert sequencer.context.defaults.typing_speed == TypingSpeed.MEDIUM

    def test_mode_from_options(self, sequencer: Sequencer) -> None:
        sequencer.start(build_step_list(":advanced-mode", "C-l"))
        assert sequencer.context.mode == RunMode.ADVANCED
        assert sequencer.context.keymap is ADVANCED_KEYMAP

    def test_mode_argument_wins(self, sequencer: Sequencer) -> None:
        sequencer.start(build_step_list(":advanced-mode", "C-l"), advanced=False)
        assert sequencer.context.keymap is SIMPLE_KEYMAP

    def test_option_step_switches_keymap(self, sequencer: Sequencer) -> None:
        sequencer.start(build_step_list("C-l", option(":advanced-mode"), "C-x o"))
        assert sequencer.context.keymap is SIMPLE_KEYMAP
        result = sequencer.advance()
        assert result.success
        assert sequencer.context.keymap is ADVANCED_KEYMAP
        assert sequencer.context.preferences.keymap_mode == KeymapMode.ADVANCED

    def test_disable_and_enable_mode(self, sequencer: Sequencer) -> None:
        sequencer.start(build_step_list(":advanced-mode", "C-l", "C-x"))
        sequencer.disable_mode()
        assert sequencer.context.keymap is None
        assert sequencer.running
        sequencer.enable_mode()
        assert sequencer.context.keymap is ADVANCED_KEYMAP

    def test_key_sequence_step(self, sequencer: Sequencer, host) -> None:
        sequencer.start(build_step_list("C-x o"))
        assert ("send_keys", ("C-x", "o"), None) in host.calls


class TestTyping:
    """Tests for typed text and predefined texts."""

    def test_typed_step(self, sequencer: Sequencer, host, sleeps: list[float]) -> None:
        sequencer.start(build_step_list(typed("ls\n", pane="%1")))
        assert host.typed == ["l", "s", "\n"]
        assert host.calls[-1] == ("type_char", "\n", "%1")
        assert len(sleeps) == 3

    def test_instant_typing(self, sequencer: Sequencer, host, sleeps: list[float]) -> None:
        sequencer.start(build_step_list(":insert-instant", typed("pwd\n")))
        assert "".join(host.typed) == "pwd\n"
        assert sleeps == []

    def test_text_type_action(self, sequencer: Sequencer, host) -> None:
        sequencer.start(build_step_list(":insert-instant", ("text.type", "hi")))
        assert host.typed == ["h", "i"]

    def test_active_sequencer_during_dispatch(self, sequencer: Sequencer) -> None:
        seen: list[Sequencer] = []
        sequencer.start(build_step_list(lambda: seen.append(active_sequencer())))
        assert seen == [sequencer]

    def test_active_sequencer_outside_dispatch(self) -> None:
        with pytest.raises(NotRunningError):
            active_sequencer()

    def test_predefined_text(self, host, operator, pacer) -> None:
        context = DemoContext(
            texts={"h": "echo hello\n"},
            checkpoints=CheckpointStore(host.settings),
        )
        sequencer = Sequencer(host, operator, context=context, pacer=pacer)
        sequencer.start(build_step_list(":advanced-mode", ":insert-instant", "C-l"))

        assert sequencer.perform(OperatorCommand.INSERT_TEXT, "h") is None
        assert "".join(host.typed) == "echo hello\n"

        assert sequencer.insert_predefined_text("z") is False
        assert operator.notifications == ["No predefined text for key 'z'"]


class TestPerform:
    """Tests for operator commands."""

    def test_perform_maps_commands(self, sequencer: Sequencer, abc: StepList, ran: list[str]) -> None:
        sequencer.start(abc)
        assert sequencer.perform(OperatorCommand.ADVANCE).step_number == 2
        assert sequencer.perform(OperatorCommand.JUMP, "3").step_number == 3
        assert sequencer.perform(OperatorCommand.RE_ADVANCE).step_number == 3
        sequencer.perform(OperatorCommand.DISABLE_MODE)
        assert sequencer.context.keymap is None
        sequencer.perform(OperatorCommand.END)
        assert not sequencer.running
        assert ran == ["A", "B", "C", "C"]

    def test_advance_and_insert(self, host, operator, pacer, ran: list[str]) -> None:
        """The advance-and-insert command runs the next step, then types the text."""
        context = DemoContext(texts={"h": "hi\n"}, checkpoints=CheckpointStore(host.settings))
        sequencer = Sequencer(host, operator, context=context, pacer=pacer)
        sequencer.start(
            build_step_list(":insert-instant", lambda: ran.append("A"), lambda: ran.append("B"))
        )

        result = sequencer.perform(OperatorCommand.ADVANCE_AND_INSERT, "h")

        assert result.step_number == 2
        assert ran == ["A", "B"]
        assert "".join(host.typed) == "hi\n"

    def test_advance_and_insert_past_end_types_nothing(self, host, operator, pacer) -> None:
        context = DemoContext(texts={"h": "hi\n"}, checkpoints=CheckpointStore(host.settings))
        sequencer = Sequencer(host, operator, context=context, pacer=pacer)
        sequencer.start(build_step_list("C-l"))

        result = sequencer.perform(OperatorCommand.ADVANCE_AND_INSERT, "h")

        assert result.status == StepStatus.FINISHED
        assert host.typed == []
        assert not sequencer.running
