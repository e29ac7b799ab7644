# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import collections.abc
import io
import math
import typing

import pytest
import trio

from teapot import commands
from teapot.commontypes import Msg
from teapot.keys import Key
from teapot.options import ProgramOptions
from teapot.program import Model, Program
from teapot.renderer import NilRenderer


class FakeTTYInput(trio.abc.ReceiveStream):
    """Something that looks enough like a terminal for a Program to read from it."""

    def __init__(self, is_raw: bool = False):
        self.is_raw = is_raw
        self.raw_mode_calls: list[bool] = []
        self.closed = False
        self._send, self._receive = trio.open_memory_channel(math.inf)

    def set_raw_mode(self, enabled: bool):
        self.raw_mode_calls.append(enabled)
        self.is_raw = enabled

    def feed(self, data: bytes | str):
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._send.send_nowait(data)

    def end(self, data: bytes | str = b""):
        if data:
            self.feed(data)
        self._send.close()

    async def receive_some(self, max_bytes: typing.Optional[int] = None) -> bytes:
        try:
            return await self._receive.receive()
        except trio.EndOfChannel:
            return b""

    async def aclose(self):
        self.closed = True
        await trio.lowlevel.checkpoint()


class RecordingRenderer(NilRenderer):
    """Keeps track of the modes a real renderer would switch, and every frame."""

    def __init__(self):
        self.running = False
        self.frames: list[str] = []
        self.handled: list[Msg] = []
        self.calls: list[str] = []
        self.start_count = 0
        self.stop_count = 0
        self.kill_count = 0
        self._alt_screen = False
        self._bracketed_paste = False
        self._report_focus = False
        self.cursor_hidden = False
        self.mouse: set[str] = set()
        self.title: typing.Optional[str] = None

    def start(self):
        self.calls.append("start")
        self.start_count += 1
        self.running = True

    def stop(self):
        self.calls.append("stop")
        self.stop_count += 1
        self.running = False

    def kill(self):
        self.calls.append("kill")
        self.kill_count += 1
        self.running = False

    def write(self, view: str):
        self.frames.append(view)

    def clear_screen(self):
        self.calls.append("clear_screen")

    @property
    def alt_screen(self):
        return self._alt_screen

    def enter_alt_screen(self):
        self.calls.append("enter_alt_screen")
        self._alt_screen = True

    def exit_alt_screen(self):
        self.calls.append("exit_alt_screen")
        self._alt_screen = False

    def show_cursor(self):
        self.cursor_hidden = False

    def hide_cursor(self):
        self.cursor_hidden = True

    def enable_mouse_cell_motion(self):
        self.mouse.add("cell")

    def disable_mouse_cell_motion(self):
        self.mouse.discard("cell")

    def enable_mouse_all_motion(self):
        self.mouse.add("all")

    def disable_mouse_all_motion(self):
        self.mouse.discard("all")

    def enable_mouse_sgr_mode(self):
        self.mouse.add("sgr")

    def disable_mouse_sgr_mode(self):
        self.mouse.discard("sgr")

    @property
    def bracketed_paste_active(self):
        return self._bracketed_paste

    def enable_bracketed_paste(self):
        self._bracketed_paste = True

    def disable_bracketed_paste(self):
        self._bracketed_paste = False

    @property
    def reporting_focus(self):
        return self._report_focus

    def enable_report_focus(self):
        self._report_focus = True

    def disable_report_focus(self):
        self._report_focus = False

    def set_window_title(self, title: str):
        self.title = title

    def handle_message(self, msg: Msg):
        self.handled.append(msg)


class RecordingModel(Model):
    """Remembers every message; quits on "q", and otherwise runs whatever on_msg says."""

    def __init__(self, init_cmd=None, on_msg: typing.Optional[collections.abc.Callable[[Msg], typing.Any]] = None):
        self.msgs: list[Msg] = []
        self.init_cmd = init_cmd
        self.on_msg = on_msg

    def init(self):
        return self.init_cmd

    def update(self, msg: Msg):
        self.msgs.append(msg)
        if isinstance(msg, Key) and str(msg) == "q":
            return self, commands.quit
        if self.on_msg is not None:
            return self, self.on_msg(msg)
        return self, None

    def view(self):
        return f"{len(self.msgs)} message(s)"

    def of_type(self, msg_type: type) -> list[Msg]:
        return [msg for msg in self.msgs if isinstance(msg, msg_type)]


async def wait_until(predicate: collections.abc.Callable[[], bool], deadline: float = 5):
    with trio.fail_after(deadline):
        while not predicate():
            await trio.sleep(0.001)


@pytest.fixture
def tty_input():
    return FakeTTYInput()


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def make_program(tty_input: FakeTTYInput, renderer: RecordingRenderer):
    def factory(model, **kwargs):
        kwargs.setdefault("input", tty_input)
        kwargs.setdefault("renderer", renderer)
        kwargs.setdefault("output", io.StringIO())
        options = kwargs.pop("options", None)
        if options is None:
            options = ProgramOptions.for_test(**kwargs.pop("option_overrides", {}))
        return Program(model, options=options, **kwargs)

    return factory
