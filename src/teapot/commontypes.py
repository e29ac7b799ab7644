# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import collections.abc
import typing

import msgspec

Msg = typing.Any
Cmd = collections.abc.Callable[[], typing.Any]


class TeapotError(Exception):
    """Base class for every error raised by teapot itself."""

    def __init__(self, *args, cause: typing.Optional[BaseException] = None):
        super().__init__(*args)
        if cause is not None:
            self.__cause__ = cause

    @property
    def cause(self) -> typing.Optional[BaseException]:
        return self.__cause__


class ProgramKilledError(TeapotError):
    def __init__(self, *, cause: typing.Optional[BaseException] = None):
        super().__init__("program was killed", cause=cause)


class ProgramPanicError(TeapotError):
    def __init__(self, *, cause: BaseException):
        super().__init__(f"program experienced a panic: {cause!r}", cause=cause)


class ProgramInterruptedError(TeapotError):
    def __init__(self):
        super().__init__("program was interrupted")


class ProgramFinishedError(TeapotError):
    def __init__(self):
        super().__init__("program already finished")


class ContextCanceledError(TeapotError):
    def __init__(self):
        super().__init__("context canceled")


class InputReaderCanceledError(TeapotError):
    def __init__(self):
        super().__init__("input reader canceled")


class TTYError(TeapotError):
    pass


class SuspendProcessError(TeapotError):
    pass


# Terminal reasons. Every way a program can end funnels into exactly one of these.


class Quit(msgspec.Struct, frozen=True):
    pass


class Interrupted(msgspec.Struct, frozen=True):
    pass


class Killed(msgspec.Struct, frozen=True):
    cause: typing.Optional[BaseException] = None


class Panicked(msgspec.Struct, frozen=True):
    cause: BaseException


TerminalReason = Quit | Interrupted | Killed | Panicked


def error_for_reason(reason: TerminalReason) -> typing.Optional[TeapotError]:
    match reason:
        case Quit():
            return None
        case Interrupted():
            return ProgramInterruptedError()
        case Killed(cause=cause):
            return ProgramKilledError(cause=cause)
        case Panicked(cause=cause):
            return ProgramKilledError(cause=ProgramPanicError(cause=cause))
