# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Commands: zero-argument callables that produce at most one message.

A command may be a plain function or a coroutine function; the program awaits
whatever it gets back. Returning None means there's nothing to report.
"""
from __future__ import annotations

import collections.abc
import datetime
import inspect
import time
import typing

import trio

from . import messages
from .commontypes import Cmd, Msg


async def run_cmd(cmd: Cmd) -> Msg:
    result = cmd()
    if inspect.isawaitable(result):
        return await result
    return result


def _compact(cmds: collections.abc.Iterable[typing.Optional[Cmd]]):
    valid = tuple(cmd for cmd in cmds if cmd is not None)
    if not valid:
        return None
    if len(valid) == 1:
        return valid[0]
    return valid


def batch(*cmds: typing.Optional[Cmd]) -> typing.Optional[Cmd]:
    """Run cmds concurrently; their messages arrive in whatever order they finish."""
    compacted = _compact(cmds)
    if compacted is None or callable(compacted):
        return compacted
    return lambda: messages.BatchMsg(cmds=compacted)


def sequence(*cmds: typing.Optional[Cmd]) -> typing.Optional[Cmd]:
    """Run cmds one after another, each starting once the last has delivered."""
    compacted = _compact(cmds)
    if compacted is None or callable(compacted):
        return compacted
    return lambda: messages.SequenceMsg(cmds=compacted)


def sequentially(*cmds: typing.Optional[Cmd]) -> Cmd:
    """Run cmds in order and return the first message any of them produces."""

    async def run_until_message():
        for cmd in cmds:
            if cmd is None:
                continue
            msg = await run_cmd(cmd)
            if msg is not None:
                return msg
        return None

    return run_until_message


def tick(duration: float, fn: collections.abc.Callable[[datetime.datetime], Msg]) -> Cmd:
    """Wait for duration seconds, then report fn(now)."""

    async def ticker():
        await trio.sleep(duration)
        return fn(datetime.datetime.now())

    return ticker


def every(duration: float, fn: collections.abc.Callable[[datetime.datetime], Msg]) -> Cmd:
    """Like tick, but fires in step with the wall clock: every(60, ...) fires on the minute."""

    async def ticker():
        await trio.sleep(duration - time.time() % duration)
        return fn(datetime.datetime.now())

    return ticker


def _const(msg):
    return lambda: msg


quit = _const(messages.QuitMsg())
interrupt = _const(messages.InterruptMsg())
suspend = _const(messages.SuspendMsg())
clear_screen = _const(messages.ClearScreenMsg())
enter_alt_screen = _const(messages.EnterAltScreenMsg())
exit_alt_screen = _const(messages.ExitAltScreenMsg())
enable_mouse_cell_motion = _const(messages.EnableMouseCellMotionMsg())
enable_mouse_all_motion = _const(messages.EnableMouseAllMotionMsg())
disable_mouse = _const(messages.DisableMouseMsg())
hide_cursor = _const(messages.HideCursorMsg())
show_cursor = _const(messages.ShowCursorMsg())
enable_bracketed_paste = _const(messages.EnableBracketedPasteMsg())
disable_bracketed_paste = _const(messages.DisableBracketedPasteMsg())
enable_report_focus = _const(messages.EnableReportFocusMsg())
disable_report_focus = _const(messages.DisableReportFocusMsg())
clear_scroll_area = _const(messages.ClearScrollAreaMsg())


def set_window_title(title: str) -> Cmd:
    return _const(messages.SetWindowTitleMsg(title))


def window_size(width: int, height: int) -> Cmd:
    return _const(messages.WindowSizeMsg(width=width, height=height))


def println(*args) -> Cmd:
    """Print above the program's output. Lost in the alt screen, where there's no "above"."""
    return _const(messages.PrintLineMsg(" ".join(str(a) for a in args)))


def printf(template: str, *args) -> Cmd:
    return _const(messages.PrintLineMsg(template % args if args else template))


def sync_scroll_area(lines: collections.abc.Sequence[str], top_boundary: int, bottom_boundary: int) -> Cmd:
    return _const(messages.SyncScrollAreaMsg(lines=tuple(lines), top_boundary=top_boundary, bottom_boundary=bottom_boundary))


def scroll_up(lines: collections.abc.Sequence[str], top_boundary: int, bottom_boundary: int) -> Cmd:
    return _const(messages.ScrollUpMsg(lines=tuple(lines), top_boundary=top_boundary, bottom_boundary=bottom_boundary))


def scroll_down(lines: collections.abc.Sequence[str], top_boundary: int, bottom_boundary: int) -> Cmd:
    return _const(messages.ScrollDownMsg(lines=tuple(lines), top_boundary=top_boundary, bottom_boundary=bottom_boundary))


def exec_process(args: collections.abc.Sequence[str], callback: typing.Optional[messages.ExecCallback] = None) -> Cmd:
    """Run an external program in the foreground, then hand callback the error, if any."""
    return _const(messages.ExecMsg(args=tuple(args), callback=callback))
