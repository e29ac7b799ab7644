# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Control messages understood by the program itself, as opposed to the model."""
from __future__ import annotations

import collections.abc
import typing

import msgspec

from .commontypes import Cmd


class QuitMsg(msgspec.Struct, frozen=True):
    pass


class InterruptMsg(msgspec.Struct, frozen=True):
    pass


class SuspendMsg(msgspec.Struct, frozen=True):
    pass


class ResumeMsg(msgspec.Struct, frozen=True):
    pass


class WindowSizeMsg(msgspec.Struct, frozen=True):
    width: int
    height: int


class ClearScreenMsg(msgspec.Struct, frozen=True):
    pass


class EnterAltScreenMsg(msgspec.Struct, frozen=True):
    pass


class ExitAltScreenMsg(msgspec.Struct, frozen=True):
    pass


class EnableMouseCellMotionMsg(msgspec.Struct, frozen=True):
    pass


class EnableMouseAllMotionMsg(msgspec.Struct, frozen=True):
    pass


class DisableMouseMsg(msgspec.Struct, frozen=True):
    pass


class HideCursorMsg(msgspec.Struct, frozen=True):
    pass


class ShowCursorMsg(msgspec.Struct, frozen=True):
    pass


class EnableBracketedPasteMsg(msgspec.Struct, frozen=True):
    pass


class DisableBracketedPasteMsg(msgspec.Struct, frozen=True):
    pass


class EnableReportFocusMsg(msgspec.Struct, frozen=True):
    pass


class DisableReportFocusMsg(msgspec.Struct, frozen=True):
    pass


class SetWindowTitleMsg(msgspec.Struct, frozen=True):
    title: str


class PrintLineMsg(msgspec.Struct, frozen=True):
    body: str


class SyncScrollAreaMsg(msgspec.Struct, frozen=True, kw_only=True):
    lines: tuple[str, ...]
    top_boundary: int
    bottom_boundary: int


class ScrollUpMsg(msgspec.Struct, frozen=True, kw_only=True):
    lines: tuple[str, ...]
    top_boundary: int
    bottom_boundary: int


class ScrollDownMsg(msgspec.Struct, frozen=True, kw_only=True):
    lines: tuple[str, ...]
    top_boundary: int
    bottom_boundary: int


class ClearScrollAreaMsg(msgspec.Struct, frozen=True):
    pass


ExecCallback = collections.abc.Callable[[typing.Optional[BaseException]], typing.Any]


class ExecMsg(msgspec.Struct, frozen=True):
    """Run args as a subprocess with the terminal handed over to it."""

    args: tuple[str, ...]
    callback: typing.Optional[ExecCallback] = None


class BatchMsg(msgspec.Struct, frozen=True):
    cmds: tuple[Cmd, ...]


class SequenceMsg(msgspec.Struct, frozen=True):
    cmds: tuple[Cmd, ...]

