# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import shutil
import signal
import subprocess

import pytest
import trio

import teapot.program  # important to preserve the namespace for monkeypatching
from conftest import FakeTTYInput, RecordingModel, RecordingRenderer, wait_until
from teapot import commands
from teapot.commontypes import (
    ContextCanceledError,
    Interrupted,
    Killed,
    Panicked,
    ProgramFinishedError,
    ProgramInterruptedError,
    ProgramKilledError,
    ProgramPanicError,
    Quit,
    SuspendProcessError,
    TTYError,
)
from teapot.context import Context
from teapot.keys import Key, KeyType
from teapot.messages import (
    DisableBracketedPasteMsg,
    DisableMouseMsg,
    EnableMouseAllMotionMsg,
    EnterAltScreenMsg,
    PrintLineMsg,
    QuitMsg,
    ResumeMsg,
    SetWindowTitleMsg,
    SuspendMsg,
    WindowSizeMsg,
)
from teapot.options import MouseMode, ProgramOptions
from teapot.program import DEFAULT_INPUT, Model, Program, ProgramState

needs_job_control = pytest.mark.skipif(not hasattr(signal, "SIGTSTP"), reason="no job control on this platform")


class Boom(Exception):
    pass


def explode(msg):
    if msg == "boom":
        raise Boom("kaboom")
    return None


def delayed(value, delay: float):
    async def cmd():
        await trio.sleep(delay)
        return value

    return cmd


def leaves(exc: BaseException):
    if isinstance(exc, BaseExceptionGroup):
        for inner in exc.exceptions:
            yield from leaves(inner)
    else:
        yield exc


async def test_quit_on_keypress(make_program, tty_input: FakeTTYInput, renderer: RecordingRenderer):
    model = RecordingModel()
    program = make_program(model)
    tty_input.feed("q")
    with trio.fail_after(5):
        result = await program.run()
    assert result is model
    assert model.msgs == [Key.from_runes("q")]
    assert program.exit_reason == Quit()
    assert program.state.value == ProgramState.STOPPED
    assert tty_input.raw_mode_calls == [True, False]
    assert renderer.stop_count == 1
    assert renderer.kill_count == 0
    assert renderer.frames[0] == "0 message(s)"
    assert renderer.frames[-1] == "1 message(s)"


async def test_quit_from_init_without_input(renderer: RecordingRenderer):
    program = Program(RecordingModel(init_cmd=commands.quit), input=None, renderer=renderer, options=ProgramOptions.for_test())
    with trio.fail_after(5):
        await program.run()
    assert program.exit_reason == Quit()
    assert renderer.stop_count == 1


def test_run_program(renderer: RecordingRenderer):
    model = RecordingModel(init_cmd=commands.quit)
    result = teapot.program.run_program(model, input=None, renderer=renderer, options=ProgramOptions.for_test())
    assert result is model


async def test_startup_modes(make_program, renderer: RecordingRenderer, nursery: trio.Nursery):
    program = make_program(
        RecordingModel(), option_overrides={"alt_screen": True, "mouse_mode": "all_motion", "report_focus": True}
    )
    await program.start(nursery)
    assert program.state.value == ProgramState.RUNNING
    assert renderer.running
    assert renderer.alt_screen
    assert renderer.bracketed_paste_active
    assert renderer.reporting_focus
    assert renderer.cursor_hidden
    assert renderer.mouse == {"all", "sgr"}

    program.quit()
    await program.wait()
    assert not renderer.alt_screen
    assert not renderer.bracketed_paste_active
    assert not renderer.reporting_focus
    assert not renderer.cursor_hidden
    assert renderer.mouse == set()


async def test_raw_mode_is_restored_to_what_it_was(renderer: RecordingRenderer):
    already_raw = FakeTTYInput(is_raw=True)
    program = Program(RecordingModel(init_cmd=commands.quit), input=already_raw, renderer=renderer, options=ProgramOptions.for_test())
    with trio.fail_after(5):
        await program.run()
    assert already_raw.raw_mode_calls == [True, True]


async def test_kill(make_program, renderer: RecordingRenderer, nursery: trio.Nursery):
    program = make_program(RecordingModel())
    await program.start(nursery)
    program.kill()
    with pytest.raises(ProgramKilledError) as excinfo:
        await program.wait()
    assert excinfo.value.cause is None
    assert program.exit_reason == Killed()
    assert renderer.kill_count == 1
    assert renderer.stop_count == 0


async def test_kill_with_reason(make_program, nursery: trio.Nursery):
    program = make_program(RecordingModel())
    await program.start(nursery)
    reason = RuntimeError("enough")
    program.kill(reason)
    with pytest.raises(ProgramKilledError) as excinfo:
        await program.wait()
    assert excinfo.value.cause is reason


async def test_kill_before_start(make_program, nursery: trio.Nursery):
    program = make_program(RecordingModel())
    program.kill()
    with pytest.raises(ProgramFinishedError):
        await program.start(nursery)
    with pytest.raises(ProgramKilledError):
        await program.wait()


async def test_interrupt(make_program, nursery: trio.Nursery):
    program = make_program(RecordingModel(init_cmd=commands.interrupt))
    await program.start(nursery)
    with pytest.raises(ProgramInterruptedError):
        await program.wait()
    assert program.exit_reason == Interrupted()


async def test_panic_in_update(make_program, renderer: RecordingRenderer, nursery: trio.Nursery):
    model = RecordingModel(on_msg=explode)
    program = make_program(model)
    await program.start(nursery)
    await program.send("boom")
    with pytest.raises(ProgramKilledError) as excinfo:
        await program.wait()
    panic = excinfo.value.cause
    assert isinstance(panic, ProgramPanicError)
    assert isinstance(panic.cause, Boom)
    assert isinstance(program.exit_reason, Panicked)
    assert renderer.kill_count == 1


async def test_panic_in_command(make_program, nursery: trio.Nursery):
    async def failing():
        await trio.sleep(0)
        raise Boom("from a command")

    program = make_program(RecordingModel(init_cmd=failing))
    await program.start(nursery)
    with pytest.raises(ProgramKilledError) as excinfo:
        await program.wait()
    assert isinstance(excinfo.value.cause, ProgramPanicError)
    assert str(excinfo.value.cause.cause) == "from a command"


async def test_panic_in_view(make_program, nursery: trio.Nursery):
    class BrokenView(Model):
        def view(self):
            raise Boom("no view for you")

    program = make_program(BrokenView())
    await program.start(nursery)
    with pytest.raises(ProgramKilledError) as excinfo:
        await program.wait()
    assert isinstance(excinfo.value.cause.cause, Boom)


async def test_panics_propagate_when_not_caught(make_program, tty_input: FakeTTYInput):
    program = make_program(RecordingModel(on_msg=explode), option_overrides={"catch_panics": False})
    with pytest.raises(BaseExceptionGroup) as excinfo:
        with trio.fail_after(5):
            async with trio.open_nursery() as nursery:
                await program.start(nursery)
                await program.send("boom")
    assert any(isinstance(exc, Boom) for exc in leaves(excinfo.value))
    assert tty_input.raw_mode_calls == [True, False]
    with pytest.raises(ProgramKilledError):
        await program.wait()


async def test_context_cancel(make_program, renderer: RecordingRenderer, nursery: trio.Nursery):
    context = Context()
    program = make_program(RecordingModel(), context=context)
    await program.start(nursery)
    context.cancel()
    with pytest.raises(ProgramKilledError) as excinfo:
        await program.wait()
    assert isinstance(excinfo.value.cause, ContextCanceledError)
    assert renderer.kill_count == 1


async def test_context_cancel_with_cause(make_program, nursery: trio.Nursery):
    context = Context()
    program = make_program(RecordingModel(), context=context)
    await program.start(nursery)
    cause = TimeoutError("deadline")
    context.cancel(cause)
    with pytest.raises(ProgramKilledError) as excinfo:
        await program.wait()
    assert excinfo.value.cause is cause


async def test_context_cancelled_before_start(make_program, renderer: RecordingRenderer, nursery: trio.Nursery):
    context = Context()
    context.cancel()
    program = make_program(RecordingModel(), context=context)
    await program.start(nursery)
    with pytest.raises(ProgramKilledError):
        await program.wait()
    # the terminal was never touched, so there is nothing to clean up
    assert renderer.start_count == 0
    assert renderer.kill_count == 0


@pytest.mark.parametrize("stop_how", ("kill", "context"))
async def test_running_commands_are_abandoned_on_stop(make_program, nursery: trio.Nursery, stop_how: str):
    started = trio.Event()
    finished = trio.Event()

    async def stubborn():
        started.set()
        with trio.CancelScope(shield=True):
            await trio.sleep(0.05)
        finished.set()
        return "late"

    context = Context()
    model = RecordingModel(init_cmd=stubborn)
    program = make_program(model, context=context)
    await program.start(nursery)
    with trio.fail_after(5):
        await started.wait()
    if stop_how == "kill":
        program.kill()
    else:
        context.cancel()
    # the stop doesn't wait on the command
    with pytest.raises(ProgramKilledError):
        with trio.fail_after(0.01):
            await program.wait()
    assert not finished.is_set()
    with trio.fail_after(5):
        await finished.wait()
    await trio.sleep(0.01)
    assert "late" not in model.msgs


async def test_send_waits_for_start(make_program):
    model = RecordingModel()
    program = make_program(model)
    with trio.fail_after(5):
        async with trio.open_nursery() as nursery:
            nursery.start_soon(program.send, "early")
            await trio.sleep(0.01)
            assert model.msgs == []
            await program.start(nursery)
            await wait_until(lambda: "early" in model.msgs)
            program.quit()


async def test_send_after_stop_is_a_no_op(make_program, nursery: trio.Nursery):
    model = RecordingModel(init_cmd=commands.quit)
    program = make_program(model)
    await program.start(nursery)
    await program.wait()
    await program.send("late")
    await trio.sleep(0.01)
    assert "late" not in model.msgs


async def test_start_after_stop_fails(make_program, nursery: trio.Nursery):
    program = make_program(RecordingModel(init_cmd=commands.quit))
    await program.start(nursery)
    await program.wait()
    with pytest.raises(ProgramFinishedError):
        await program.start(nursery)


async def test_concurrent_starts_share_one_startup(make_program, renderer: RecordingRenderer):
    program = make_program(RecordingModel())
    with trio.fail_after(5):
        async with trio.open_nursery() as nursery:
            nursery.start_soon(program.start, nursery)
            nursery.start_soon(program.start, nursery)
            await program.state.wait_value(lambda s: s == ProgramState.RUNNING)
            await trio.sleep(0.01)
            program.quit()
    assert renderer.start_count == 1


@pytest.mark.parametrize("async_filter", [False, True])
async def test_filter_can_veto_quit(make_program, nursery: trio.Nursery, async_filter: bool):
    vetoes = 0

    def veto(model, msg):
        nonlocal vetoes
        if isinstance(msg, QuitMsg) and vetoes < 3:
            vetoes += 1
            return None
        return msg

    async def async_veto(model, msg):
        await trio.sleep(0)
        return veto(model, msg)

    model = RecordingModel()
    program = make_program(model, filter=async_veto if async_filter else veto)
    await program.start(nursery)
    for i in range(3):
        program.quit()
        await wait_until(lambda: vetoes == i + 1)
        assert program.state.value == ProgramState.RUNNING
    program.quit()
    with trio.fail_after(5):
        assert await program.wait() is model
    assert vetoes == 3


async def test_filter_can_rewrite_messages(make_program, nursery: trio.Nursery):
    model = RecordingModel()
    program = make_program(model, filter=lambda model, msg: msg.upper() if isinstance(msg, str) else msg)
    await program.start(nursery)
    await program.send("hello")
    await wait_until(lambda: "HELLO" in model.msgs)


async def test_sequence_delivers_in_order(make_program, nursery: trio.Nursery):
    model = RecordingModel(init_cmd=commands.sequence(delayed("a", 0.03), delayed("b", 0.01), delayed("c", 0)))
    program = make_program(model)
    await program.start(nursery)
    await wait_until(lambda: len(model.of_type(str)) == 3)
    assert model.of_type(str) == ["a", "b", "c"]


async def test_batch_delivers_each_once(make_program, nursery: trio.Nursery):
    model = RecordingModel(init_cmd=commands.batch(delayed("a", 0.03), delayed("b", 0.01), delayed("c", 0)))
    program = make_program(model)
    await program.start(nursery)
    await wait_until(lambda: len(model.of_type(str)) == 3)
    await trio.sleep(0.05)
    assert sorted(model.of_type(str)) == ["a", "b", "c"]
    # the fastest command reports first
    assert model.of_type(str)[0] == "c"


async def test_nested_collections(make_program, nursery: trio.Nursery):
    model = RecordingModel(
        init_cmd=commands.sequence(
            delayed("first", 0.01),
            commands.batch(delayed("b1", 0.02), delayed("b2", 0)),
            commands.sequence(delayed("s1", 0.01), delayed("s2", 0)),
            delayed("last", 0),
        )
    )
    program = make_program(model)
    await program.start(nursery)
    await wait_until(lambda: "last" in model.msgs)
    received = model.of_type(str)
    assert received[0] == "first"
    assert sorted(received[1:3]) == ["b1", "b2"]
    assert received[3:] == ["s1", "s2", "last"]


async def test_batch_result_from_update_fans_out(make_program, nursery: trio.Nursery):
    def on_msg(msg):
        if msg == "go":
            return commands.batch(delayed("x", 0), delayed("y", 0))
        return None

    model = RecordingModel(on_msg=on_msg)
    program = make_program(model)
    await program.start(nursery)
    await program.send("go")
    await wait_until(lambda: len(model.of_type(str)) == 3)
    assert sorted(model.of_type(str)[1:]) == ["x", "y"]


async def test_update_return_shapes(make_program, nursery: trio.Nursery):
    class Counter(Model):
        def __init__(self, count=0):
            self.count = count

        async def update(self, msg):
            match msg:
                case "bare":
                    return Counter(self.count + 1)
                case "single":
                    return (Counter(self.count + 1),)
                case "keep":
                    return None
            return Counter(self.count + 1), None

    program = make_program(Counter())
    await program.start(nursery)
    for msg in ("bare", "single", "keep", "pair"):
        await program.send(msg)
    await wait_until(lambda: program.model.count == 3)


async def test_control_messages_reach_renderer_and_model(make_program, renderer: RecordingRenderer, nursery: trio.Nursery):
    model = RecordingModel()
    program = make_program(model)
    await program.start(nursery)
    for msg in (EnterAltScreenMsg(), EnableMouseAllMotionMsg(), SetWindowTitleMsg("teapot"), DisableBracketedPasteMsg()):
        await program.send(msg)
    await wait_until(lambda: len(model.msgs) == 4)
    assert renderer.alt_screen
    assert renderer.mouse == {"all", "sgr"}
    assert renderer.title == "teapot"
    assert not renderer.bracketed_paste_active

    await program.send(DisableMouseMsg())
    await wait_until(lambda: len(model.msgs) == 5)
    assert renderer.mouse == set()


async def test_println(make_program, renderer: RecordingRenderer, nursery: trio.Nursery):
    program = make_program(RecordingModel())
    await program.start(nursery)
    program.println("hello", 42)
    program.printf("%d%%", 99)
    await wait_until(lambda: len(renderer.handled) == 2)
    assert renderer.handled == [PrintLineMsg("hello 42"), PrintLineMsg("99%")]


async def test_render_after_queue_drains(make_program, renderer: RecordingRenderer, nursery: trio.Nursery):
    model = RecordingModel()
    program = make_program(model)
    await program.start(nursery)
    await wait_until(lambda: len(renderer.frames) == 1)
    program._enqueue("one")
    program._enqueue("two")
    await wait_until(lambda: len(model.msgs) == 2)
    await trio.sleep(0.01)
    assert renderer.frames == ["0 message(s)", "2 message(s)"]


async def test_release_and_restore(
    make_program, tty_input: FakeTTYInput, renderer: RecordingRenderer, nursery: trio.Nursery
):
    model = RecordingModel()
    program = make_program(model, option_overrides={"alt_screen": True, "report_focus": True})
    await program.start(nursery)

    program.release_terminal()
    assert program.ignore_signals
    assert not renderer.alt_screen
    assert not renderer.reporting_focus
    assert not renderer.bracketed_paste_active
    assert tty_input.raw_mode_calls == [True, False]
    program.release_terminal()
    assert renderer.stop_count == 1

    program.restore_terminal()
    assert not program.ignore_signals
    assert renderer.alt_screen
    assert renderer.reporting_focus
    assert renderer.bracketed_paste_active
    assert tty_input.raw_mode_calls == [True, False, True]
    assert renderer.start_count == 2
    program.restore_terminal()
    assert renderer.start_count == 2

    # input still flows after a restore
    tty_input.feed("q")
    with trio.fail_after(5):
        await program.wait()
    assert model.msgs == [Key.from_runes("q")]


async def test_restore_only_brings_back_what_was_on(make_program, renderer: RecordingRenderer, nursery: trio.Nursery):
    model = RecordingModel()
    program = make_program(model)
    await program.start(nursery)
    await program.send(DisableBracketedPasteMsg())
    await wait_until(lambda: len(model.msgs) == 1)

    program.release_terminal()
    program.restore_terminal()
    assert not renderer.bracketed_paste_active
    assert not renderer.alt_screen
    assert not renderer.reporting_focus


@needs_job_control
async def test_suspend_and_resume(
    make_program, tty_input: FakeTTYInput, renderer: RecordingRenderer, nursery: trio.Nursery
):
    suspended = trio.Event()
    resume = trio.Event()

    async def fake_suspend_process():
        suspended.set()
        await resume.wait()

    model = RecordingModel()
    program = make_program(
        model, suspend_process=fake_suspend_process, option_overrides={"alt_screen": True, "report_focus": True}
    )
    await program.start(nursery)
    await program.send(SuspendMsg())
    with trio.fail_after(5):
        await suspended.wait()

    assert program.ignore_signals
    assert not renderer.alt_screen
    assert not renderer.reporting_focus
    assert tty_input.raw_mode_calls[-1] is False
    assert renderer.stop_count == 1
    assert model.of_type(ResumeMsg) == []

    resume.set()
    await wait_until(lambda: len(model.of_type(ResumeMsg)) == 1)
    assert not program.ignore_signals
    assert renderer.alt_screen
    assert renderer.reporting_focus
    assert tty_input.raw_mode_calls[-1] is True
    assert renderer.start_count == 2
    # the model never sees the suspend request itself
    assert model.of_type(SuspendMsg) == []


@needs_job_control
async def test_each_suspend_cycle_resumes_once(make_program, nursery: trio.Nursery):
    async def fake_suspend_process():
        await trio.sleep(0)

    model = RecordingModel()
    program = make_program(model, suspend_process=fake_suspend_process)
    await program.start(nursery)
    for cycle in range(1, 4):
        await program.send(SuspendMsg())
        await wait_until(lambda: len(model.of_type(ResumeMsg)) == cycle)


@needs_job_control
async def test_window_size_after_resume(monkeypatch: pytest.MonkeyPatch, make_program, nursery: trio.Nursery):
    monkeypatch.setattr(teapot.program, "output_fd", lambda output: 1)
    monkeypatch.setattr(teapot.program, "terminal_size", lambda fd: (80, 24))

    async def fake_suspend_process():
        await trio.sleep(0)

    model = RecordingModel()
    program = make_program(model, suspend_process=fake_suspend_process)
    await program.start(nursery)
    await wait_until(lambda: len(model.of_type(WindowSizeMsg)) == 1)
    await program.send(SuspendMsg())
    await wait_until(lambda: len(model.of_type(WindowSizeMsg)) == 2)
    seen = [type(msg) for msg in model.msgs if isinstance(msg, (ResumeMsg, WindowSizeMsg))]
    assert seen == [WindowSizeMsg, ResumeMsg, WindowSizeMsg]
    assert model.msgs[-1] == WindowSizeMsg(width=80, height=24)


@needs_job_control
async def test_failed_suspend_kills(make_program, renderer: RecordingRenderer, nursery: trio.Nursery):
    async def fake_suspend_process():
        raise SuspendProcessError("nope")

    program = make_program(RecordingModel(), suspend_process=fake_suspend_process)
    await program.start(nursery)
    await program.send(SuspendMsg())
    with pytest.raises(ProgramKilledError) as excinfo:
        with trio.fail_after(5):
            await program.wait()
    assert isinstance(excinfo.value.cause, SuspendProcessError)


async def test_interrupt_signal(make_program, nursery: trio.Nursery):
    program = make_program(RecordingModel())
    await program.start(nursery)
    program.handle_signal(signal.SIGINT)
    with pytest.raises(ProgramInterruptedError):
        with trio.fail_after(5):
            await program.wait()


async def test_terminate_signal_quits(make_program, nursery: trio.Nursery):
    model = RecordingModel()
    program = make_program(model)
    await program.start(nursery)
    program.handle_signal(signal.SIGTERM)
    with trio.fail_after(5):
        assert await program.wait() is model


async def test_signals_ignored_while_released(make_program, nursery: trio.Nursery):
    program = make_program(RecordingModel())
    await program.start(nursery)
    program.release_terminal()
    program.handle_signal(signal.SIGINT)
    await trio.sleep(0.01)
    assert program.state.value == ProgramState.RUNNING
    program.restore_terminal()
    program.handle_signal(signal.SIGINT)
    with pytest.raises(ProgramInterruptedError):
        with trio.fail_after(5):
            await program.wait()


@pytest.mark.skipif(not hasattr(signal, "SIGWINCH"), reason="no SIGWINCH on this platform")
async def test_resize_signal(monkeypatch: pytest.MonkeyPatch, make_program, nursery: trio.Nursery):
    sizes = iter([(80, 24), (100, 40)])
    monkeypatch.setattr(teapot.program, "output_fd", lambda output: 1)
    monkeypatch.setattr(teapot.program, "terminal_size", lambda fd: next(sizes))
    model = RecordingModel()
    program = make_program(model)
    await program.start(nursery)
    program.handle_signal(signal.SIGWINCH)
    await wait_until(lambda: len(model.of_type(WindowSizeMsg)) == 2)
    assert model.of_type(WindowSizeMsg) == [WindowSizeMsg(width=80, height=24), WindowSizeMsg(width=100, height=40)]


@pytest.mark.skipif(shutil.which("true") is None or shutil.which("false") is None, reason="needs true and false")
@pytest.mark.parametrize("command,error_type", [("true", type(None)), ("false", subprocess.CalledProcessError)])
async def test_exec_process(make_program, tty_input: FakeTTYInput, renderer: RecordingRenderer, command, error_type):
    def on_msg(msg):
        if msg == "go":
            return commands.exec_process([command], callback=lambda err: ("exec-done", err))
        return None

    model = RecordingModel(on_msg=on_msg)
    program = make_program(model)
    with trio.fail_after(10):
        async with trio.open_nursery() as nursery:
            await program.start(nursery)
            await program.send("go")
            await wait_until(lambda: len(model.of_type(tuple)) == 1)
            program.quit()
    (done,) = model.of_type(tuple)
    assert done[0] == "exec-done"
    assert isinstance(done[1], error_type)
    assert tty_input.raw_mode_calls == [True, False, True, False]
    assert renderer.stop_count == 2
    assert renderer.start_count == 2


async def test_exec_missing_program(make_program, nursery: trio.Nursery):
    def on_msg(msg):
        if msg == "go":
            return commands.exec_process(["/nonexistent/teapot-test-binary"], callback=lambda err: ("exec-done", err))
        return None

    model = RecordingModel(on_msg=on_msg)
    program = make_program(model)
    await program.start(nursery)
    await program.send("go")
    await wait_until(lambda: len(model.of_type(tuple)) == 1)
    assert isinstance(model.of_type(tuple)[0][1], OSError)


async def test_unopenable_tty_kills(monkeypatch: pytest.MonkeyPatch, make_program, renderer: RecordingRenderer, nursery: trio.Nursery):
    def no_tty():
        raise TTYError("failed to open tty device /dev/tty", cause=FileNotFoundError())

    monkeypatch.setattr(teapot.program, "open_input_tty", no_tty)
    program = make_program(RecordingModel(), input=DEFAULT_INPUT, option_overrides={"input_tty": True})
    await program.start(nursery)
    with pytest.raises(ProgramKilledError) as excinfo:
        await program.wait()
    assert isinstance(excinfo.value.cause, TTYError)
    assert renderer.start_count == 0


async def test_escape_is_flushed_after_timeout(make_program, tty_input: FakeTTYInput, nursery: trio.Nursery):
    model = RecordingModel()
    program = make_program(model, option_overrides={"escape_timeout": 0.01})
    await program.start(nursery)
    tty_input.feed(b"\x1b")
    await wait_until(lambda: len(model.msgs) == 1)
    assert model.msgs == [Key(type=KeyType.ESC)]


async def test_split_sequence_is_reassembled(make_program, tty_input: FakeTTYInput, nursery: trio.Nursery):
    model = RecordingModel()
    program = make_program(model, option_overrides={"escape_timeout": 1})
    await program.start(nursery)
    tty_input.feed(b"\x1b[")
    await trio.sleep(0.01)
    tty_input.feed(b"A")
    await wait_until(lambda: len(model.msgs) == 1)
    assert model.msgs == [Key(type=KeyType.UP)]
