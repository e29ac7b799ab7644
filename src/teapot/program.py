# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""The program scheduler.

A Program owns a model and a message queue. One task drains the queue, handing
each message to the model's update method; commands the model returns run as
their own tasks and feed their results back into the same queue. Everything that
ends a program (quit, kill, interrupt, a panic, a cancelled context) goes through
_finish(), which restores the terminal and settles the result exactly once.
"""
from __future__ import annotations

import collections
import collections.abc
import enum
import logging
import os
import signal
import subprocess
import sys
import threading
import typing

import msgspec
import outcome
import trio
import trio_util

from . import suspend
from .commontypes import (
    Cmd,
    InputReaderCanceledError,
    Interrupted,
    Killed,
    Msg,
    Panicked,
    ProgramFinishedError,
    Quit,
    SuspendProcessError,
    TerminalReason,
    TTYError,
    error_for_reason,
)
from .commands import run_cmd
from .context import Context
from .driver import read_ansi_inputs
from .inputqueue import InputReader
from .messages import (
    BatchMsg,
    ClearScreenMsg,
    DisableBracketedPasteMsg,
    DisableMouseMsg,
    DisableReportFocusMsg,
    EnableBracketedPasteMsg,
    EnableMouseAllMotionMsg,
    EnableMouseCellMotionMsg,
    EnableReportFocusMsg,
    EnterAltScreenMsg,
    ExecMsg,
    ExitAltScreenMsg,
    HideCursorMsg,
    InterruptMsg,
    PrintLineMsg,
    QuitMsg,
    ResumeMsg,
    SequenceMsg,
    SetWindowTitleMsg,
    ShowCursorMsg,
    SuspendMsg,
    WindowSizeMsg,
)
from .options import MouseMode, ProgramOptions
from .renderer import Renderer, StandardRenderer
from .tty import TerminalInput, open_input_tty, output_fd, terminal_size
from .util import Future, maybe_await

logger = logging.getLogger(__name__)

Filter = collections.abc.Callable[[typing.Any, Msg], typing.Any]

# Stand-in for "work out the input from the options and the environment".
DEFAULT_INPUT = object()

HANDLED_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGINT", "SIGTERM", "SIGWINCH") if hasattr(signal, name)
)


class ProgramState(enum.IntEnum):
    IDLE = 0
    STARTING = 1
    RUNNING = 2
    STOPPING = 3
    STOPPED = 4


class Model:
    """Convenience base class; any object with an update method will do.

    update(msg) may return the new model, a (model, cmd) tuple, or None to keep
    the current model. init() and update() may be coroutines; view() may not.
    """

    def init(self) -> typing.Optional[Cmd]:
        return None

    def update(self, msg: Msg):
        return self, None

    def view(self) -> str:
        return ""


class TerminalSnapshot(msgspec.Struct, frozen=True):
    """Which renderer modes were active when the terminal was released."""

    alt_screen: bool
    bracketed_paste: bool
    report_focus: bool


class Program:
    state: trio_util.AsyncValue[ProgramState]

    def __init__(
        self,
        model,
        *,
        options: typing.Optional[ProgramOptions] = None,
        input: typing.Any = DEFAULT_INPUT,
        output: typing.Optional[typing.TextIO] = None,
        renderer: typing.Optional[Renderer] = None,
        filter: typing.Optional[Filter] = None,
        context: typing.Optional[Context] = None,
        suspend_process: collections.abc.Callable[[], collections.abc.Awaitable[None]] = suspend.suspend_process,
    ):
        self.model = model
        self.options = options if options is not None else ProgramOptions()
        self.output = output if output is not None else sys.stdout
        self.renderer = renderer if renderer is not None else StandardRenderer(self.output)
        self.filter = filter
        self.context = context
        self.suspend_process = suspend_process
        self.state = trio_util.AsyncValue(ProgramState.IDLE)
        self.exit_reason: typing.Optional[TerminalReason] = None
        self.ignore_signals = False

        self._input_arg = input
        self._input: typing.Optional[trio.abc.ReceiveStream] = None
        self._owns_input = False
        self._input_reader: typing.Optional[InputReader] = None
        self._input_done: typing.Optional[trio.Event] = None
        self._initial_raw = False
        self._terminal_initialized = False
        self._released: typing.Optional[TerminalSnapshot] = None

        self._queue: collections.deque[Msg] = collections.deque()
        self._lot = trio.lowlevel.ParkingLot()
        self._result: Future = Future()
        self._nursery: typing.Optional[trio.Nursery] = None

    # Lifecycle

    async def start(self, nursery: trio.Nursery):
        """Run the program in nursery, returning once it is up.

        Calls made while the program is starting join that start; calls made
        once it has stopped raise ProgramFinishedError.
        """
        match self.state.value:
            case ProgramState.IDLE:
                self.state.value = ProgramState.STARTING
                await nursery.start(self._serve)
            case ProgramState.STARTING:
                await self.state.wait_value(lambda s: s >= ProgramState.RUNNING)
            case ProgramState.RUNNING:
                pass
            case _:
                raise ProgramFinishedError()

    async def wait(self):
        """Wait for the program to end; return the final model or raise why it ended."""
        return await self._result.wait()

    async def run(self):
        async with trio.open_nursery() as nursery:
            await self.start(nursery)
        return await self.wait()

    async def _serve(self, *, task_status=trio.TASK_STATUS_IGNORED):
        try:
            async with trio.open_nursery() as nursery:
                self._nursery = nursery
                if self.context is not None:
                    self.context.add_callback(self._on_context_cancel)
                if self.state.value >= ProgramState.STOPPING:
                    task_status.started()
                    return
                try:
                    self._open_input()
                except TTYError as exc:
                    logger.warning("Could not open input: %s", exc)
                    self._finish(Killed(cause=exc))
                    task_status.started()
                    return
                self._setup_terminal()
                self.state.value = ProgramState.RUNNING
                logger.debug("Program running")
                self._start_input()
                if self.options.handle_signals:
                    if threading.current_thread() is threading.main_thread():
                        await nursery.start(self._handle_signals)
                    else:
                        logger.warning("Not on the main thread; signals will not be handled")
                self._check_resize()
                task_status.started()
                nursery.start_soon(self._drain_queue)
                await self._run_init()
        except BaseException as exc:
            if self.state.value < ProgramState.STOPPING:
                self._finish(Killed(cause=exc))
            raise
        finally:
            if self._owns_input and self._input is not None:
                with trio.CancelScope(shield=True):
                    await self._input.aclose()

    async def _run_init(self):
        try:
            init = getattr(self.model, "init", None)
            cmd = await maybe_await(init()) if callable(init) else None
            self._schedule(cmd)
            self._render()
        except Exception as exc:
            self._handle_panic(exc)

    def _finish(self, reason: TerminalReason):
        if self.state.value >= ProgramState.STOPPING:
            return
        logger.debug("Program stopping: %r", reason)
        self.exit_reason = reason
        self.state.value = ProgramState.STOPPING
        self._queue.clear()
        if self.context is not None:
            self.context.remove_callback(self._on_context_cancel)
        if self._input_reader is not None:
            self._input_reader.cancel()
        if self._terminal_initialized:
            if isinstance(reason, Quit):
                self.renderer.stop()
            else:
                self.renderer.kill()
            self._restore_terminal_state()
        self.state.value = ProgramState.STOPPED
        error = error_for_reason(reason)
        self._result.finalize(outcome.Error(error) if error is not None else outcome.Value(self.model))
        if self._nursery is not None:
            self._nursery.cancel_scope.cancel()

    def _on_context_cancel(self, cause: BaseException):
        self._finish(Killed(cause=cause))

    def _handle_panic(self, exc: Exception):
        if not self.options.catch_panics:
            raise exc
        logger.exception("Caught panic", exc_info=exc)
        self._finish(Panicked(cause=exc))

    # Public controls

    async def send(self, msg: Msg):
        """Deliver msg to the program, once it has started. Does nothing after it stops."""
        await self.state.wait_value(lambda s: s >= ProgramState.RUNNING)
        self._enqueue(msg)

    def quit(self):
        self._enqueue(QuitMsg())

    def kill(self, reason: typing.Optional[BaseException] = None):
        """Stop right away, without waiting for queued messages or running commands."""
        self._finish(Killed(cause=reason))

    def println(self, *args):
        self._enqueue(PrintLineMsg(" ".join(str(a) for a in args)))

    def printf(self, template: str, *args):
        self._enqueue(PrintLineMsg(template % args if args else template))

    # The queue

    def _enqueue(self, msg: Msg):
        if msg is None or self.state.value >= ProgramState.STOPPING:
            return
        self._queue.append(msg)
        self._lot.unpark_all()

    async def _drain_queue(self):
        while True:
            while not self._queue:
                await self._lot.park()
            msg = self._queue.popleft()
            try:
                await self._dispatch(msg)
                if not self._queue and self.state.value == ProgramState.RUNNING:
                    self._render()
            except Exception as exc:
                self._handle_panic(exc)
            if self.state.value >= ProgramState.STOPPING:
                return
            await trio.lowlevel.checkpoint()

    def _fan_out(self, msg: Msg) -> bool:
        match msg:
            case BatchMsg(cmds=cmds):
                self._nursery.start_soon(self._exec_batch, cmds)
            case SequenceMsg(cmds=cmds):
                self._nursery.start_soon(self._exec_sequence, cmds)
            case _:
                return False
        return True

    async def _dispatch(self, msg: Msg):
        if self._fan_out(msg):
            return
        if self.filter is not None:
            msg = await maybe_await(self.filter(self.model, msg))
            if msg is None:
                return
            if self._fan_out(msg):
                return

        match msg:
            case QuitMsg():
                self._finish(Quit())
                return
            case InterruptMsg():
                self._finish(Interrupted())
                return
            case SuspendMsg():
                if suspend.suspend_supported():
                    await self._suspend()
                return
            case ExecMsg():
                await self._exec(msg)
                return

        self._route_control(msg)
        self.renderer.handle_message(msg)

        result = await maybe_await(self.model.update(msg))
        cmd = None
        match result:
            case None:
                pass
            case tuple((new_model, cmd)):
                self.model = new_model
            case tuple((new_model,)):
                self.model = new_model
            case new_model:
                self.model = new_model
        self._schedule(cmd)

    def _route_control(self, msg: Msg):
        r = self.renderer
        match msg:
            case ClearScreenMsg():
                r.clear_screen()
            case EnterAltScreenMsg():
                r.enter_alt_screen()
            case ExitAltScreenMsg():
                r.exit_alt_screen()
            case EnableMouseCellMotionMsg():
                r.enable_mouse_cell_motion()
                r.enable_mouse_sgr_mode()
            case EnableMouseAllMotionMsg():
                r.enable_mouse_all_motion()
                r.enable_mouse_sgr_mode()
            case DisableMouseMsg():
                r.disable_mouse_cell_motion()
                r.disable_mouse_all_motion()
                r.disable_mouse_sgr_mode()
            case HideCursorMsg():
                r.hide_cursor()
            case ShowCursorMsg():
                r.show_cursor()
            case EnableBracketedPasteMsg():
                r.enable_bracketed_paste()
            case DisableBracketedPasteMsg():
                r.disable_bracketed_paste()
            case EnableReportFocusMsg():
                r.enable_report_focus()
            case DisableReportFocusMsg():
                r.disable_report_focus()
            case SetWindowTitleMsg(title=title):
                r.set_window_title(title)

    def _render(self):
        view = getattr(self.model, "view", None)
        if callable(view):
            self.renderer.write(view())

    # Commands

    def _schedule(self, cmd: typing.Optional[Cmd]):
        if cmd is None or self._nursery is None or self.state.value >= ProgramState.STOPPING:
            return
        self._nursery.start_soon(self._exec_cmd, cmd)

    async def _exec_cmd(self, cmd: Cmd):
        try:
            msg = await run_cmd(cmd)
        except Exception as exc:
            self._handle_panic(exc)
            return
        self._enqueue(msg)

    async def _exec_batch(self, cmds: collections.abc.Iterable[typing.Optional[Cmd]]):
        async with trio.open_nursery() as nursery:
            for cmd in cmds:
                if cmd is not None:
                    nursery.start_soon(self._run_and_deliver, cmd)

    async def _exec_sequence(self, cmds: collections.abc.Iterable[typing.Optional[Cmd]]):
        for cmd in cmds:
            if cmd is None:
                continue
            await self._run_and_deliver(cmd)
            if self.state.value >= ProgramState.STOPPING:
                return

    async def _run_and_deliver(self, cmd: Cmd):
        # nested collections run here, in place, so a sequence waits for them
        try:
            msg = await run_cmd(cmd)
        except Exception as exc:
            self._handle_panic(exc)
            return
        match msg:
            case BatchMsg(cmds=cmds):
                await self._exec_batch(cmds)
            case SequenceMsg(cmds=cmds):
                await self._exec_sequence(cmds)
            case _:
                self._enqueue(msg)

    # The terminal

    def _open_input(self):
        if self._input_arg is not DEFAULT_INPUT:
            self._input = self._input_arg
            return
        if self.options.input_tty or (sys.stdin is not None and sys.stdin.isatty()):
            self._input = open_input_tty()
        elif sys.stdin is not None:
            # piped input; a private copy of the descriptor can go non-blocking safely
            self._input = TerminalInput(os.dup(sys.stdin.fileno()))
        self._owns_input = self._input is not None

    def _set_raw_mode(self, enabled: bool):
        set_raw_mode = getattr(self._input, "set_raw_mode", None)
        if callable(set_raw_mode):
            set_raw_mode(enabled)

    def _setup_terminal(self):
        self._initial_raw = bool(getattr(self._input, "is_raw", False))
        self._set_raw_mode(True)
        self._terminal_initialized = True
        r = self.renderer
        r.hide_cursor()
        if self.options.alt_screen:
            r.enter_alt_screen()
        if self.options.bracketed_paste:
            r.enable_bracketed_paste()
        match self.options.mouse_mode:
            case MouseMode.CELL_MOTION:
                r.enable_mouse_cell_motion()
                r.enable_mouse_sgr_mode()
            case MouseMode.ALL_MOTION:
                r.enable_mouse_all_motion()
                r.enable_mouse_sgr_mode()
        if self.options.report_focus:
            r.enable_report_focus()
        r.start()

    def _restore_terminal_state(self):
        r = self.renderer
        r.disable_bracketed_paste()
        r.show_cursor()
        r.disable_mouse_cell_motion()
        r.disable_mouse_all_motion()
        r.disable_mouse_sgr_mode()
        if r.reporting_focus:
            r.disable_report_focus()
        if r.alt_screen:
            r.exit_alt_screen()
        self._set_raw_mode(self._initial_raw)

    def _check_resize(self):
        fd = output_fd(self.output)
        if fd is None:
            return
        size = terminal_size(fd)
        if size is not None:
            width, height = size
            self._enqueue(WindowSizeMsg(width=width, height=height))

    def release_terminal(self):
        """Hand the terminal back, as it was before the program started.

        Repeated calls do nothing until restore_terminal() is called.
        """
        if self.state.value != ProgramState.RUNNING or self._released is not None:
            return
        self.ignore_signals = True
        r = self.renderer
        self._released = TerminalSnapshot(
            alt_screen=r.alt_screen,
            bracketed_paste=r.bracketed_paste_active,
            report_focus=r.reporting_focus,
        )
        logger.debug("Releasing terminal: %r", self._released)
        self._stop_input()
        r.stop()
        self._restore_terminal_state()

    def restore_terminal(self):
        """Take the terminal back after release_terminal(), with the modes it had then."""
        if self._reacquire_terminal():
            self._check_resize()

    def _reacquire_terminal(self) -> bool:
        if self.state.value != ProgramState.RUNNING or self._released is None:
            return False
        snapshot, self._released = self._released, None
        logger.debug("Restoring terminal: %r", snapshot)
        self._set_raw_mode(True)
        self._start_input()
        r = self.renderer
        if snapshot.alt_screen:
            r.enter_alt_screen()
        else:
            # whatever ran meanwhile has moved the cursor; draw afresh below it
            r.reset_lines_rendered()
            r.repaint()
        r.start()
        if snapshot.bracketed_paste:
            r.enable_bracketed_paste()
        if snapshot.report_focus:
            r.enable_report_focus()
        self.ignore_signals = False
        try:
            self._render()
        except Exception as exc:
            self._handle_panic(exc)
        return True

    async def _suspend(self):
        self.release_terminal()
        try:
            await self.suspend_process()
        except SuspendProcessError as exc:
            logger.warning("Could not suspend: %s", exc)
            self._reacquire_terminal()
            self._finish(Killed(cause=exc))
            return
        self._reacquire_terminal()
        self._enqueue(ResumeMsg())
        self._check_resize()

    async def _exec(self, msg: ExecMsg):
        self.release_terminal()
        error = None
        try:
            await trio.run_process(list(msg.args), check=True, stdin=None, env=self.options.environ)
        except (OSError, subprocess.CalledProcessError) as exc:
            error = exc
        self.restore_terminal()
        if msg.callback is not None:
            self._enqueue(msg.callback(error))

    # Input

    def _flush_timeout(self) -> typing.Optional[float]:
        timeout = self.options.escape_timeout
        return timeout.total_seconds() if timeout is not None else None

    def _start_input(self):
        if self._input is None or self._nursery is None:
            return
        reader = InputReader(self._input)
        previous_done = self._input_done
        self._input_reader = reader
        self._input_done = trio.Event()
        self._nursery.start_soon(self._read_input, reader, previous_done, self._input_done)

    def _stop_input(self):
        # close, not cancel: whatever was already read still gets delivered
        if self._input_reader is not None:
            self._input_reader.close()
            self._input_reader = None

    async def _read_input(
        self, reader: InputReader, previous_done: typing.Optional[trio.Event], done: trio.Event
    ):
        try:
            # only one reader may be receiving from the stream at a time
            if previous_done is not None:
                await previous_done.wait()
            async with trio.open_nursery() as nursery:
                nursery.start_soon(reader.run)
                try:
                    await read_ansi_inputs(reader.queue, self._enqueue, flush_timeout=self._flush_timeout())
                except InputReaderCanceledError:
                    pass
                except OSError as exc:
                    logger.warning("Error reading input: %s", exc)
                    self._finish(Killed(cause=exc))
        finally:
            done.set()

    # Signals

    async def _handle_signals(self, *, task_status=trio.TASK_STATUS_IGNORED):
        with trio.open_signal_receiver(*HANDLED_SIGNALS) as signals:
            task_status.started()
            async for signum in signals:
                self.handle_signal(signum)

    def handle_signal(self, signum: int):
        if self.ignore_signals:
            logger.debug("Ignoring signal %d while the terminal is released", signum)
            return
        if signum == signal.SIGINT:
            self._enqueue(InterruptMsg())
        elif signum == signal.SIGTERM:
            self._enqueue(QuitMsg())
        elif signum == getattr(signal, "SIGWINCH", None):
            self._check_resize()


def run_program(model, **kwargs):
    """Run a program to completion in a fresh trio run; return its final model."""
    program = Program(model, **kwargs)
    return trio.run(program.run)
